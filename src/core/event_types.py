"""Event type constants."""


class EventTypes:
    """Event type string constants"""

    # catalog
    CATALOG_RELOADED = "catalog_reloaded"

    # tool state
    TOOL_STATE_SAVED = "tool_state_saved"
