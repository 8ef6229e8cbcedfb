"""Convenience exports for service layer."""
from .auth_service import (
    authenticate_user,
    create_access_token,
    decode_access_token,
    get_current_user,
    get_optional_user,
    register_user,
)
from .comment_service import create_comment, delete_comment, list_comments, update_comment
from .engagement_service import (
    ReactionTransition,
    clear_reaction,
    engagement_snapshot,
    record_reaction,
    record_view,
    resolve_reaction,
)
from .ownership import authorize_mutation, ensure_owner
from .reconcile_service import ReconciliationError, ReconciliationSummary, run_reconciliation
from .spaces_service import (
    SpacesConfigurationError,
    SpacesDeletionError,
    SpacesUploadError,
    get_spaces_client,
    upload_file_to_spaces,
)
from .video_service import (
    create_video_record,
    delete_video_record,
    list_video_records,
    update_video_record,
    view_video,
)

__all__ = [
    "authenticate_user",
    "register_user",
    "create_access_token",
    "decode_access_token",
    "get_current_user",
    "get_optional_user",
    "create_comment",
    "update_comment",
    "delete_comment",
    "list_comments",
    "ReactionTransition",
    "resolve_reaction",
    "record_reaction",
    "clear_reaction",
    "record_view",
    "engagement_snapshot",
    "authorize_mutation",
    "ensure_owner",
    "ReconciliationError",
    "ReconciliationSummary",
    "run_reconciliation",
    "SpacesConfigurationError",
    "SpacesDeletionError",
    "SpacesUploadError",
    "get_spaces_client",
    "upload_file_to_spaces",
    "create_video_record",
    "update_video_record",
    "delete_video_record",
    "list_video_records",
    "view_video",
]
