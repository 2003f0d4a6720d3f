# enrollment_service/config.py
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class Settings:
    courses_file: str
    enrollments_file: str
    request_log_file: str = "./server.log"
    upload_dir: str = "./uploads"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000


def get_settings() -> Settings:
    """Build settings from the environment (and .env if present)"""
    data_dir = os.getenv("DATA_DIR", "./data")
    return Settings(
        courses_file=os.getenv("COURSES_FILE", os.path.join(data_dir, "courses.json")),
        enrollments_file=os.getenv("ENROLLMENTS_FILE", os.path.join(data_dir, "enrollments.json")),
        request_log_file=os.getenv("REQUEST_LOG_FILE", "./server.log"),
        upload_dir=os.getenv("UPLOAD_DIR", "./uploads"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
    )
