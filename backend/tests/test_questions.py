import random
import re

from tugofmath.services.match.questions import generate_question

QUESTION_RE = re.compile(r'^(\d+) ([+\-×]) (\d+) = \?$')


def _evaluate(text):
    a, op, b = QUESTION_RE.match(text).groups()
    a, b = int(a), int(b)
    if op == '+':
        return a, op, b, a + b
    if op == '-':
        return a, op, b, a - b
    return a, op, b, a * b


def test_options_contain_answer_once_and_are_distinct():
    rng = random.Random(1234)
    for _ in range(2000):
        q = generate_question(rng)
        assert len(q.options) == 4
        assert len(set(q.options)) == 4
        assert q.options.count(q.answer) == 1
        assert all(0 <= o <= 100 for o in q.options)


def test_answer_matches_text_and_stays_in_range():
    rng = random.Random(99)
    for _ in range(2000):
        q = generate_question(rng)
        a, op, b, expected = _evaluate(q.text)
        assert q.answer == expected
        assert 0 <= q.answer <= 100
        if op == '-':
            assert b <= a
        if op == '×':
            assert 0 <= a <= 12 and 0 <= b <= 12


def test_distractors_are_within_ten_of_answer():
    rng = random.Random(5)
    for _ in range(500):
        q = generate_question(rng)
        assert all(abs(o - q.answer) <= 10 for o in q.options)


def test_all_operators_are_used():
    rng = random.Random(42)
    ops = {_evaluate(generate_question(rng).text)[1] for _ in range(300)}
    assert ops == {'+', '-', '×'}


def test_same_seed_gives_same_question():
    a = generate_question(random.Random(3))
    b = generate_question(random.Random(3))
    assert (a.text, a.answer, a.options) == (b.text, b.answer, b.options)


def test_public_view_hides_answer():
    q = generate_question(random.Random(8))
    assert q.to_dict() == {'question': q.text, 'options': q.options}
