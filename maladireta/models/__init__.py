# Make `from maladireta.models import User, Client, ...` work
from .orm import (  # re-export
    User,
    Client,
    Campaign,
    CampaignAttachment,
    CampaignSend,
    EmailConfiguration,
)
