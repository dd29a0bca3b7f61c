import pytest
from whenever import Instant

from nyaacatalog.comments import LEGACY_USER_ID, merge_comments, normalize_comment
from nyaacatalog.models import Comment, OldComment, User


def test_normalize_old_comment():
    """Test legacy comments keep their username and pre-rendered content."""
    comment = OldComment(
        username="someone", content="<b>hi</b>", date=Instant.from_utc(2020, 1, 1)
    )

    result = normalize_comment(comment)

    assert result.user_id == LEGACY_USER_ID == -1
    assert result.username == "someone"
    assert result.content == "<b>hi</b>"
    assert result.user_avatar == ""
    assert result.date == Instant.from_utc(2020, 1, 1)


def test_normalize_comment_renders_markdown():
    """Test current comments are rendered from Markdown."""
    user = User(id=3, username="reader", md5="abc123")
    comment = Comment(
        user=user, content="**great**", created_at=Instant.from_utc(2020, 1, 1)
    )

    result = normalize_comment(comment)

    assert result.user_id == 3
    assert result.username == "reader"
    assert result.user_avatar == "abc123"
    assert result.content == "<p><strong>great</strong></p>\n"


def test_normalize_comment_escapes_html():
    """Test raw HTML in current comments is not passed through."""
    user = User(id=3, username="reader")
    comment = Comment(
        user=user,
        content="<script>alert(1)</script>",
        created_at=Instant.from_utc(2020, 1, 1),
    )

    result = normalize_comment(comment)

    assert "<script>" not in result.content
    assert "&lt;script&gt;" in result.content


def test_normalize_comment_without_user():
    """Test comments of deleted users become empty placeholders."""
    created = Instant.from_utc(2020, 1, 2)
    comment = Comment(user=None, content="secret", created_at=created)

    result = normalize_comment(comment)

    assert result.username == ""
    assert result.user_id == 0
    assert result.user_avatar == ""
    assert result.content == ""
    assert result.date == created


def test_normalize_unknown_type():
    """Test unsupported comment types are rejected."""
    with pytest.raises(TypeError):
        normalize_comment("not a comment")


def test_merge_legacy_then_placeholder():
    """Test a legacy comment and a placeholder keep chronological order."""
    old = OldComment(username="old", content="hi", date=Instant.from_utc(2020, 1, 1))
    current = Comment(user=None, content="x", created_at=Instant.from_utc(2020, 1, 2))

    merged = merge_comments([old], [current])

    assert [c.user_id for c in merged] == [-1, 0]
    assert merged[0].content == "hi"
    assert merged[1].content == ""


def test_merge_sorts_by_date():
    """Test merged comments are ordered oldest first across both schemas."""
    user = User(id=1, username="u")
    old = [
        OldComment(username="a", content="3", date=Instant.from_utc(2020, 1, 3)),
        OldComment(username="b", content="1", date=Instant.from_utc(2020, 1, 1)),
    ]
    current = [
        Comment(user=user, content="4", created_at=Instant.from_utc(2020, 1, 4)),
        Comment(user=user, content="2", created_at=Instant.from_utc(2020, 1, 2)),
    ]

    merged = merge_comments(old, current)

    assert len(merged) == 4
    dates = [c.date for c in merged]
    assert dates == sorted(dates)
    assert [c.username for c in merged] == ["b", "u", "a", "u"]


def test_merge_ties_keep_legacy_first():
    """Test equal dates keep legacy comments before current ones."""
    same = Instant.from_utc(2020, 1, 1)
    user = User(id=1, username="current")
    old = [
        OldComment(username="legacy1", content="", date=same),
        OldComment(username="legacy2", content="", date=same),
    ]
    current = [Comment(user=user, content="", created_at=same)]

    merged = merge_comments(old, current)

    assert [c.username for c in merged] == ["legacy1", "legacy2", "current"]


def test_merge_empty():
    """Test merging no comments."""
    assert merge_comments([], []) == []


def test_comment_date_serialization():
    """Test comment dates serialize as ISO timestamps in UTC."""
    old = OldComment(
        username="a", content="", date=Instant.from_utc(2020, 1, 1, 8, 30, 0)
    )

    dumped = normalize_comment(old).model_dump(mode="json")

    assert dumped == {
        "username": "a",
        "user_id": -1,
        "user_avatar": "",
        "content": "",
        "date": "2020-01-01T08:30:00Z",
    }
