"""
Admin API Data Models

Pydantic models for admin settings and uploads.
The admin API speaks camelCase; fields are snake_case with aliases.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# SETTINGS
# =============================================================================

class GeneralSettings(ApiModel):
    site_name: str
    site_description: str = ""
    default_language: str = "en"
    timezone: str = "UTC"
    platform_name: Optional[str] = None
    company_name: Optional[str] = None


class AppearanceSettings(ApiModel):
    primary_color: str
    secondary_color: str
    logo_url: str = ""
    favicon_url: str = ""
    dark_mode: bool = False


class NotificationSettings(ApiModel):
    email_notifications: bool = True
    push_notifications: bool = False
    course_completions: bool = True
    new_enrollments: bool = True
    system_updates: bool = True
    marketing_communications: bool = False


class PasswordPolicy(ApiModel):
    min_length: int = Field(default=8, ge=1)
    require_uppercase: bool = True
    require_numbers: bool = True
    require_symbols: bool = False


class SecuritySettings(ApiModel):
    registration_enabled: bool = True
    require_email_verification: bool = True
    two_factor_enabled: bool = False
    password_policy: PasswordPolicy = Field(default_factory=PasswordPolicy)


class SystemSettings(ApiModel):
    maintenance_mode: bool = False
    max_file_upload_size: int = Field(default=100, description="Megabytes")
    allowed_file_types: List[str] = Field(default_factory=list)
    api_rate_limit: int = 1000
    session_timeout: int = Field(default=60, description="Minutes")


class BillingSettings(ApiModel):
    stripe_publishable_key: Optional[str] = None
    currency: str = "USD"
    tax_rate: float = 0.0
    trial_period_days: int = 0


class AdminSettings(ApiModel):
    """Platform settings as returned by GET /admin/settings."""
    general: GeneralSettings
    appearance: AppearanceSettings
    notifications: NotificationSettings
    security: SecuritySettings
    system: SystemSettings
    billing: Optional[BillingSettings] = None


SETTINGS_SECTIONS = ("general", "appearance", "notifications", "security", "system", "billing")


# =============================================================================
# UPLOADS
# =============================================================================

class UploadResult(ApiModel):
    """Location of an uploaded file."""
    url: str
    id: str
