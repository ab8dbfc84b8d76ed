"""
Enrichment stage.

Deterministic, level-dependent fill-in of firmographics, technographics
and compliance data. No provider is called; `providers` is only recorded
in the run metadata.
"""
from typing import List, Optional

from leadqual.core.clock import utcnow
from leadqual.models.lead import Lead, LeadStatus, advance_status
from leadqual.schemas.enrichment import EnrichedFields, EnrichmentLevel, Provider

DEFAULT_INDUSTRY = "Software"
DEFAULT_REVENUE_BAND = "$10–50M"
DEFAULT_EMPLOYEE_BAND = "51–200"

ENHANCED_TECHNOGRAPHICS = ["CRM", "Marketing Automation", "Analytics"]
ENHANCED_TOOLS = ["Salesforce", "HubSpot", "Google Analytics"]
ENHANCED_KEYWORDS = ["software", "automation", "efficiency"]

PREMIUM_TECHNOGRAPHICS = ENHANCED_TECHNOGRAPHICS + ["ERP", "BI"]
PREMIUM_TOOLS = ENHANCED_TOOLS + ["Tableau", "SAP"]
PREMIUM_KEYWORDS = ENHANCED_KEYWORDS + ["scalability", "integration"]
PREMIUM_COMPLIANCE = {
    "gdpr_compliant": True,
    "soc2_compliant": True,
    "iso27001_compliant": False,
}


def enrich_lead(
    lead: Lead,
    level: EnrichmentLevel,
    providers: Optional[List[Provider]] = None
) -> EnrichedFields:
    """
    Compute the enrichment for a lead at the given level.

    Pure: the lead is not modified. Raises ValueError for an unknown level.
    """
    level = EnrichmentLevel(level)

    fields = EnrichedFields(
        sources=[f"ENRICHED_{level.value}"],
        risk_flags=[],
        compliance={},
        industry=lead.industry or DEFAULT_INDUSTRY,
        revenue_band=lead.revenue_band or DEFAULT_REVENUE_BAND,
        employee_band=lead.employee_band or DEFAULT_EMPLOYEE_BAND,
    )

    if level == EnrichmentLevel.ENHANCED:
        fields.technographics = list(ENHANCED_TECHNOGRAPHICS)
        fields.installed_tools_hints = list(ENHANCED_TOOLS)
        fields.intent_keywords = list(ENHANCED_KEYWORDS)
    elif level == EnrichmentLevel.PREMIUM:
        fields.technographics = list(PREMIUM_TECHNOGRAPHICS)
        fields.installed_tools_hints = list(PREMIUM_TOOLS)
        fields.intent_keywords = list(PREMIUM_KEYWORDS)
        fields.compliance = dict(PREMIUM_COMPLIANCE)

    return fields


def apply_enrichment(
    lead: Lead,
    fields: EnrichedFields,
    level: EnrichmentLevel,
    providers: Optional[List[Provider]] = None
) -> Lead:
    """
    Merge enriched fields onto the lead.

    Firmographics and tech lists only overwrite when the run produced a
    value. Risk flags and compliance are always replaced by the run's.
    `sources` is extended, never replaced. Columns are reassigned rather
    than mutated in place so JSON changes are tracked.
    """
    now = utcnow()

    lead.industry = fields.industry or lead.industry
    lead.revenue_band = fields.revenue_band or lead.revenue_band
    lead.employee_band = fields.employee_band or lead.employee_band
    lead.technographics = fields.technographics or lead.technographics
    lead.installed_tools_hints = fields.installed_tools_hints or lead.installed_tools_hints
    lead.intent_keywords = fields.intent_keywords or lead.intent_keywords
    lead.risk_flags = list(fields.risk_flags)
    lead.compliance = dict(fields.compliance)
    lead.sources = [*(lead.sources or []), *fields.sources]

    lead.postprocessing = {
        **(lead.postprocessing or {}),
        "enrichment": {
            "level": EnrichmentLevel(level).value,
            "providers": [Provider(p).value for p in providers or []],
            "enriched_at": now.isoformat(),
            "data": fields.model_dump(exclude_none=True),
        },
    }

    lead.status = advance_status(lead.status, LeadStatus.ENRICHED)
    lead.enriched_at = now
    lead.updated_at = now
    return lead
