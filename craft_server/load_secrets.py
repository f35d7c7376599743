import os
import pathlib
from dotenv import load_dotenv

load_dotenv()

user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST")
port = os.getenv("DB_PORT")
db_name = os.getenv("DB_NAME")

sqlite_path = os.getenv(
    "SQLITE_PATH", str(pathlib.Path(__file__).parents[1] / "craft.db")
)
db_timeout = float(os.getenv("DB_TIMEOUT", "5"))

cors_origins = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
server_host = os.getenv("HOST", "0.0.0.0")
server_port = int(os.getenv("PORT", "3000"))

if __name__ == "__main__":
    print(host, port, db_name, sqlite_path, db_timeout, cors_origins, log_level)
