"""Application constants.

Contains the tracking-parameter catalogue, attribution parameter name,
points amounts, and the paths that list jobs.
"""

# ---------------------------------------------------------------------------
# Tracking parameters stripped from submitted job URLs
# ---------------------------------------------------------------------------
TRACKING_PARAM_PREFIXES: tuple[str, ...] = ("utm_",)

TRACKING_PARAM_NAMES: frozenset[str] = frozenset({
    "ref",
    "fbclid",       # Facebook
    "gclid",        # Google Ads
    "gad_source",   # Google Ads
    "msclkid",      # Microsoft/Bing Ads
    "twclid",       # Twitter/X
    "li_fat_id",    # LinkedIn
    "mc_eid",       # Mailchimp
    "oly_enc_id",   # Omeda
    "_hsenc",       # HubSpot
    "_hsmi",        # HubSpot
    "vero_id",      # Vero
    "mkt_tok",      # Marketo
})

# Appended when a link is served, never stored.
ATTRIBUTION_PARAM: str = "utm_source"

# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------
POINTS_JOB_CREATED: int = 100
POINTS_JOB_DEACTIVATED: int = 200

# ---------------------------------------------------------------------------
# Pages that render job listings and must be revalidated after a mutation
# ---------------------------------------------------------------------------
JOB_LISTING_PATHS: tuple[str, ...] = ("/", "/admin", "/admin/jobs")

# ---------------------------------------------------------------------------
# Analytics event names
# ---------------------------------------------------------------------------
EVENT_JOB_ADDED: str = "job_added"
EVENT_JOB_UPDATED: str = "job_updated"

# Fields compared when reporting what an update changed.
JOB_EDITABLE_FIELDS: tuple[str, ...] = (
    "title",
    "company",
    "location",
    "url",
    "is_active",
)

# ---------------------------------------------------------------------------
# Structured data
# ---------------------------------------------------------------------------
SITE_NAME: str = "LisboaUX Jobs"
SITE_DESCRIPTION: str = "Find UX design and digital product design jobs in Portugal."
JOB_ADDRESS_COUNTRY: str = "PT"
