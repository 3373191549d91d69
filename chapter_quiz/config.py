from pathlib import Path
from dotenv import load_dotenv  # pip install python-dotenv
import os

ROOT_DIR = Path(__file__).parent.parent

# ищем файл, имя приходит из переменной или берём .env
env_file = os.getenv("ENV_FILE", ".env")
load_dotenv(ROOT_DIR / env_file)

bot_token = os.getenv("BOT_TOKEN")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DB_PATH = Path(os.getenv("QUIZ_DB_PATH", ROOT_DIR / "data" / "quiz.db"))

# Chapter content: local directory unless a URL is given
CONTENT_DIR = Path(os.getenv("QUIZ_CONTENT_DIR", ROOT_DIR / "content"))
CONTENT_URL = os.getenv("QUIZ_CONTENT_URL")

# Seconds the answer feedback stays on screen before the next question
ANSWER_DELAY = float(os.getenv("ANSWER_DELAY", "1.5"))
