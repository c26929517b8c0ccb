"""Authentication flow constants for authflow.

Centralized definitions for query parameter names, state keys and analytics
event names. Flow code should import from this module instead of using
hardcoded values.
"""

# Query parameters
QUERY_PARAMETER_STATE = "state"
QUERY_PARAMETER_REDIRECT_URL = "redirectUrl"
QUERY_PARAMETER_IS_FROM_SIGNUP = "isFromSignup"

# Keys recognized inside the OAuth2 state envelope
STATE_PARAMETER_ORIGIN = "origin"
RECOGNIZED_STATE_KEYS = frozenset({STATE_PARAMETER_ORIGIN})

# Fallback target when no better signal exists
DEFAULT_REDIRECT_URL = "/"

# Analytics events
EVENT_FIRST_LOGIN = "FIRST_LOGIN"
ATTR_IS_FROM_INVITE = "isFromInvite"

# Authentication variants
FLOW_OAUTH2 = "oauth2"
FLOW_LOCAL = "local"
