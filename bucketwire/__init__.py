from bucketwire.context import AppContext, context
from bucketwire.exceptions import InvalidArgumentError
from bucketwire.notifications import RegistrationContext, SubscriptionRequest

__all__ = [
    "AppContext",
    "InvalidArgumentError",
    "RegistrationContext",
    "SubscriptionRequest",
    "context",
]
