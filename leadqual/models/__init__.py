# Models package - table models register with SQLModel.metadata on import
from leadqual.models.user import User, Organization
from leadqual.models.lead import Lead, Contact, IcpProfile
from leadqual.models.scoring import LeadScore
