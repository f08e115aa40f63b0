"""Business logic services for the Roastr front-end."""

from .authoring import PostAuthoring, validate_post_draft
from .client import RoastrClient
from .feed import (
    ANONYMOUS_USERNAME,
    UNKNOWN_USERNAME,
    FeedCache,
    PostFeed,
    aggregate_feed,
    aggregate_library,
)
from .feed_view import SortKey, apply_view
from .identity import IdentityProvider, StaticIdentity, viewer_from_token
from .notify import CollectingNotifier, Messages, Notifier
from .profiles import ProfileService
from .reports import ReportSubmission
from .saves import SaveCoordinator
from .tags import TagCatalog
from .votes import VoteCoordinator

__all__ = [
    "PostAuthoring", "validate_post_draft",
    "RoastrClient",
    "ANONYMOUS_USERNAME", "UNKNOWN_USERNAME",
    "FeedCache", "PostFeed", "aggregate_feed", "aggregate_library",
    "SortKey", "apply_view",
    "IdentityProvider", "StaticIdentity", "viewer_from_token",
    "CollectingNotifier", "Messages", "Notifier",
    "ProfileService",
    "ReportSubmission",
    "SaveCoordinator",
    "TagCatalog",
    "VoteCoordinator",
]
