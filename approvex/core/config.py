import os
import logging
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Dict, Optional
from dotenv import load_dotenv

load_dotenv()

class AISettings(BaseModel):
    openrouter_api_key: Optional[str] = Field(default=os.getenv("OPENROUTER_API_KEY"))
    model_name: str = Field(default=os.getenv("AI_MODEL_NAME", "google/gemini-2.0-flash-001"))
    kill_switch: bool = Field(default=os.getenv("AI_KILL_SWITCH", "false").lower() == "true")
    temperature: float = 0.3

class EmailSettings(BaseModel):
    resend_api_key: Optional[str] = Field(default=os.getenv("RESEND_API_KEY"))
    sender: str = Field(default=os.getenv("EMAIL_SENDER", "ApproveX <notifications@approvex.app>"))

class IntegrationSettings(BaseModel):
    # Bounded retry for every outbound collaborator call
    max_attempts: int = int(os.getenv("INTEGRATION_MAX_ATTEMPTS", "3"))
    wait_seconds: float = float(os.getenv("INTEGRATION_RETRY_WAIT", "1"))
    timeout_seconds: float = float(os.getenv("INTEGRATION_TIMEOUT", "15"))

class LeaveSettings(BaseModel):
    monthly_limit: int = int(os.getenv("LEAVE_MONTHLY_LIMIT", "5"))
    yearly_limit: int = int(os.getenv("LEAVE_YEARLY_LIMIT", "60"))
    low_balance_threshold: int = int(os.getenv("LEAVE_LOW_BALANCE_THRESHOLD", "3"))
    default_totals: Dict[str, int] = {
        "Annual Leave": 20,
        "Sick Leave": 10,
        "Personal Leave": 5,
    }

class RequestPolicySettings(BaseModel):
    expense_limits: Dict[str, Decimal] = {
        "Travel": Decimal("500"),
        "Meals": Decimal("50"),
        "Software": Decimal("200"),
        "Office Supplies": Decimal("100"),
    }
    default_expense_limit: Decimal = Decimal("100")
    asset_auto_approve_limit: Decimal = Decimal(os.getenv("ASSET_AUTO_APPROVE_LIMIT", "100"))

class Config(BaseModel):
    app_name: str = "ApproveX"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"
    actor_header: str = "X-User-Id"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./approvex.db")

    # Bootstrap manager account, created when the users table is empty
    default_manager_email: Optional[str] = os.getenv("DEFAULT_MANAGER_EMAIL")

    # Collaborators
    ai: AISettings = AISettings()
    email: EmailSettings = EmailSettings()
    integrations: IntegrationSettings = IntegrationSettings()

    # Policy constants
    leave: LeaveSettings = LeaveSettings()
    policy: RequestPolicySettings = RequestPolicySettings()

    cors_origins: list = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173",
            ).split(",")
            if o.strip()
        ]
    )

settings = Config()

_logger = logging.getLogger(__name__)
if settings.environment == "production":
    if settings.database_url.startswith("sqlite"):
        _logger.warning("⚠ Running production with SQLite; conditional writes are not row-locked.")
    if not settings.email.resend_api_key:
        _logger.warning("⚠ RESEND_API_KEY is not set; approval emails will not be delivered.")
