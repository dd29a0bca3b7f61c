"""Merging of legacy and current comments into one chronological list."""

from functools import singledispatch

from .markup import markdown_to_html
from .models import Comment, CommentJSON, OldComment

# user_id for comments whose author has no user record on this site
LEGACY_USER_ID = -1


@singledispatch
def normalize_comment(comment) -> CommentJSON:
    raise TypeError(f"Unsupported comment type: {type(comment).__name__}")


@normalize_comment.register
def _(comment: OldComment) -> CommentJSON:
    # Legacy content was rendered by the old site and is stored as markup
    return CommentJSON(
        username=comment.username,
        user_id=LEGACY_USER_ID,
        content=comment.content,
        date=comment.date,
    )


@normalize_comment.register
def _(comment: Comment) -> CommentJSON:
    if comment.user is None:
        # Author was deleted; keep the slot so counts and ordering hold
        return CommentJSON(date=comment.created_at)

    return CommentJSON(
        username=comment.user.username,
        user_id=comment.user.id,
        user_avatar=comment.user.md5,
        content=markdown_to_html(comment.content),
        date=comment.created_at,
    )


def merge_comments(
    old_comments: list[OldComment], comments: list[Comment]
) -> list[CommentJSON]:
    """Normalize both comment schemas and order them oldest first.

    Legacy comments come before current ones on equal dates.
    """
    merged = [normalize_comment(c) for c in old_comments]
    merged.extend(normalize_comment(c) for c in comments)
    return sorted(merged, key=lambda c: c.date)
