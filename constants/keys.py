class StateKeys:
    """Keys for data stored in ``st.session_state``."""

    AUTH_TOKEN = "auth.token"
    AUTH_USER = "auth.user"
    SIMULATION_FLAG = "auth.restaurant_simulation"
    TRACK_STATUS_CACHE = "data.track_status"
    ROUTE_HISTORY = "router.history"
    SCHEDULER = "runtime.scheduler"
    DESTINATION = "routing.destination"

    @staticmethod
    def onboarding_state(track: str) -> str:
        return f"onboarding:{track}:state"


class QueryKeys:
    """Keys used in ``st.query_params``."""

    PATH = "path"
