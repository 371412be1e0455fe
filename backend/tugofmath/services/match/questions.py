import random

from tugofmath.models import BALL_MAX, BALL_MIN, Question

OPERATORS = ('+', '-', '×')
OPTION_COUNT = 4
MAX_FACTOR = 12
MAX_DELTA = 10


def _operands(op: str, rng) -> tuple:
    if op == '+':
        a = rng.randint(0, BALL_MAX)
        b = rng.randint(0, BALL_MAX - a)
        return a, b, a + b
    if op == '-':
        a = rng.randint(0, BALL_MAX)
        b = rng.randint(0, a)
        return a, b, a - b
    # Keep the product within 0..100
    a = rng.randint(0, MAX_FACTOR)
    max_b = MAX_FACTOR if a == 0 else min(MAX_FACTOR, BALL_MAX // a)
    b = rng.randint(0, max_b)
    return a, b, a * b


def generate_question(rng=None) -> Question:
    """Generate an arithmetic question with four distinct options.

    The options are the correct answer plus distractors drawn within +/-10
    of it and inside 0..100, shuffled. Distractor sampling has no retry
    bound: it stops only once four distinct values exist. Every answer in
    0..100 has at least ten valid neighbours, so the loop ends with
    probability 1, but a hardened build should cap the number of draws.
    """
    rng = rng or random
    op = rng.choice(OPERATORS)
    a, b, answer = _operands(op, rng)

    options = [answer]
    while len(options) < OPTION_COUNT:
        candidate = answer + rng.randint(-MAX_DELTA, MAX_DELTA)
        if BALL_MIN <= candidate <= BALL_MAX and candidate not in options:
            options.append(candidate)
    rng.shuffle(options)

    return Question(text=f"{a} {op} {b} = ?", answer=answer, options=options)
