from prometheus_client import Counter, Histogram

# Successful sign-ins that ended in a redirect
AUTH_SUCCESS_REDIRECT_TOTAL = Counter(
    "auth_success_redirect_total",
    "Post-authentication redirects issued",
    ["flow"],
)

# Redirect targets replaced by the default URL
AUTH_REDIRECT_FALLBACK_TOTAL = Counter(
    "auth_redirect_fallback_total",
    "Redirect targets rejected in favour of the default",
    ["reason"],
)

# Sign-ins whose user could not be resolved
AUTH_SUCCESS_USER_UNRESOLVED_TOTAL = Counter(
    "auth_success_user_unresolved_total",
    "Success callbacks aborted because the current user could not be loaded",
)

ONBOARDING_RUNS_TOTAL = Counter(
    "onboarding_runs_total",
    "First-login onboarding runs",
)

ONBOARDING_FAILURES_TOTAL = Counter(
    "onboarding_failures_total",
    "Best-effort onboarding step failures",
    ["step"],
)

AUTH_SUCCESS_LATENCY_SECONDS = Histogram(
    "auth_success_handler_seconds",
    "Time spent in the authentication success handler",
    ["flow"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

ANALYTICS_EVENTS_TOTAL = Counter(
    "analytics_events_total",
    "Analytics events emitted by the sign-in flow",
    ["event"],
)
