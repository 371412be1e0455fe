import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of allowed Socket.IO / HTTP origins
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:8080,http://127.0.0.1:8080',
        ).split(',') if o.strip()
    ]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Ball position (0..100) and how far one round win moves it
    BALL_START = int(os.environ.get('BALL_START', '50'))
    BALL_STEP = int(os.environ.get('BALL_STEP', '10'))
    # Pause between a non-goal win and the next question (ms)
    ROUND_ADVANCE_DELAY_MS = int(os.environ.get('ROUND_ADVANCE_DELAY_MS', '600'))
    # 'auto': next round starts after the delay; 'barrier': both players press ready again
    ROUND_ADVANCE_POLICY = os.environ.get('ROUND_ADVANCE_POLICY', 'auto')
    # 'unlimited': retry until someone wins the round; 'single': one attempt per round
    ANSWER_POLICY = os.environ.get('ANSWER_POLICY', 'unlimited')
