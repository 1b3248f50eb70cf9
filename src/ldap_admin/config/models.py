"""Configuration models for LDAP admin tools."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoggingConfig(BaseModel):
    """Logging configuration."""
    
    level: str = Field(default="WARNING", description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format"
    )
    file: Optional[str] = Field(default=None, description="Log file path")
    
    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Validate logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Level must be one of: {valid_levels}')
        return v.upper()


class Settings(BaseModel):
    """
    Directory settings shared by every command.
    
    Field aliases match the keys of the JSON configuration document.
    """
    
    model_config = ConfigDict(populate_by_name=True, frozen=True)
    
    ldap_base_dn: str = Field(..., alias="ldapBaseDN", description="Base Distinguished Name")
    admin_dn: str = Field(..., alias="adminDN", description="Administrator DN for binding")
    admin_pass: str = Field(..., alias="adminPass", description="Administrator password")
    ldap_url: str = Field(..., alias="ldapURL", description="LDAP server URL")
    user_ou: str = Field(..., alias="userOU", description="Users OU, relative to the base DN")
    group_ou: str = Field(..., alias="groupOU", description="Groups OU, relative to the base DN")
    domain_mail: str = Field(..., alias="domainMail", description="Mail domain for new users")
    timeout: int = Field(default=10, description="Connect and receive timeout in seconds")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    
    @property
    def user_base(self) -> str:
        """DN of the users OU."""
        return f"{self.user_ou},{self.ldap_base_dn}"
    
    @property
    def group_base(self) -> str:
        """DN of the groups OU."""
        return f"{self.group_ou},{self.ldap_base_dn}"
