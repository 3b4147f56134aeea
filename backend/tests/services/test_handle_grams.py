"""Gram Handler — action semantics against in-memory collaborators.

Tests cover:
    - authentication is checked before existence, existence before ownership
    - validation failures return 422 without touching store or storage
    - create/update/destroy manage stored pictures, including cleanup when
      the record write fails
    - a picture that cannot be removed after a committed write is logged,
      and the action still redirects
    - index pages newest first
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.core.domain_types import GramAction, GramView, RedirectTarget, UserId
from app.core.errors import ForbiddenError, ResourceNotFoundError, UnauthenticatedError
from app.core.request_context import GramPayload, PictureUpload, RequestContext
from app.services.handle_grams import GramHandler
from tests.services.fakes import BrokenDeleteStorage, FakeGramRepository, FakePictureStorage

OWNER = UserId(uuid.uuid4())
STRANGER = UserId(uuid.uuid4())
PNG = PictureUpload("picture.png", "image/png", b"\x89PNG")


def _handler(repo=None, storage=None):
    repo = repo or FakeGramRepository()
    storage = storage or FakePictureStorage()
    return GramHandler(repo, storage), repo, storage


# ─── authentication gate ─────────────────────────────────────────

async def test_index_is_public():
    handler, repo, _ = _handler()
    repo.add(OWNER)
    result = await handler.handle(RequestContext(action=GramAction.INDEX))
    assert result.status == 200
    assert result.view is GramView.INDEX
    assert len(result.grams) == 1
    assert result.total == 1


@pytest.mark.parametrize("action", [
    GramAction.NEW, GramAction.SHOW, GramAction.CREATE,
    GramAction.EDIT, GramAction.UPDATE, GramAction.DESTROY,
])
async def test_anonymous_actions_raise_unauthenticated(action):
    handler, repo, storage = _handler()
    gram = repo.add(OWNER)
    ctx = RequestContext(
        action=action, gram_id=str(gram.id),
        payload=GramPayload(message="x", picture=PNG),
    )
    with pytest.raises(UnauthenticatedError):
        await handler.handle(ctx)
    assert repo.calls == []
    assert storage.saved == {}


async def test_authentication_checked_before_existence():
    handler, _, _ = _handler()
    ctx = RequestContext(action=GramAction.DESTROY, gram_id="SPACEDUCK")
    with pytest.raises(UnauthenticatedError):
        await handler.handle(ctx)


# ─── existence and ownership ─────────────────────────────────────

@pytest.mark.parametrize("action", [
    GramAction.SHOW, GramAction.EDIT, GramAction.UPDATE, GramAction.DESTROY,
])
@pytest.mark.parametrize("gram_id", ["TACOCAT", str(uuid.uuid4())])
async def test_missing_gram_raises_not_found(action, gram_id):
    handler, _, _ = _handler()
    ctx = RequestContext(
        action=action, principal=STRANGER, gram_id=gram_id,
        payload=GramPayload(message="changed"),
    )
    with pytest.raises(ResourceNotFoundError) as exc:
        await handler.handle(ctx)
    assert exc.value.http_status == 404


@pytest.mark.parametrize("action", [
    GramAction.EDIT, GramAction.UPDATE, GramAction.DESTROY,
])
async def test_non_owner_is_forbidden_and_nothing_changes(action):
    handler, repo, storage = _handler()
    gram = repo.add(OWNER, message="mine")
    ctx = RequestContext(
        action=action, principal=STRANGER, gram_id=str(gram.id),
        payload=GramPayload(message="woohoo!", picture=PNG),
    )
    with pytest.raises(ForbiddenError) as exc:
        await handler.handle(ctx)
    assert exc.value.http_status == 403
    assert repo.calls == ["find"]
    assert repo.grams[gram.id].message == "mine"
    assert storage.saved == {}


async def test_show_allows_any_signed_in_user():
    handler, repo, _ = _handler()
    gram = repo.add(OWNER)
    result = await handler.handle(RequestContext(
        action=GramAction.SHOW, principal=STRANGER, gram_id=str(gram.id),
    ))
    assert result.status == 200
    assert result.view is GramView.SHOW
    assert result.gram is gram


async def test_edit_prefills_form_for_owner():
    handler, repo, _ = _handler()
    gram = repo.add(OWNER, message="initial value")
    result = await handler.handle(RequestContext(
        action=GramAction.EDIT, principal=OWNER, gram_id=str(gram.id),
    ))
    assert result.status == 200
    assert result.view is GramView.EDIT
    assert result.form == {"message": "initial value"}


async def test_new_returns_empty_form():
    handler, _, _ = _handler()
    result = await handler.handle(RequestContext(action=GramAction.NEW, principal=OWNER))
    assert result.status == 200
    assert result.view is GramView.NEW
    assert result.form == {"message": ""}


# ─── create ──────────────────────────────────────────────────────

async def test_create_persists_gram_owned_by_principal():
    handler, repo, storage = _handler()
    result = await handler.handle(RequestContext(
        action=GramAction.CREATE, principal=OWNER,
        payload=GramPayload(message="Hello!", picture=PNG),
    ))
    assert result.status == 302
    assert result.redirect is RedirectTarget.ROOT
    (gram,) = repo.grams.values()
    assert gram.message == "Hello!"
    assert gram.user_id == OWNER
    assert gram.picture in storage.saved


async def test_create_whitespace_message_is_unprocessable():
    handler, repo, storage = _handler()
    result = await handler.handle(RequestContext(
        action=GramAction.CREATE, principal=OWNER,
        payload=GramPayload(message=" ", picture=PNG),
    ))
    assert result.status == 422
    assert result.view is GramView.NEW
    assert result.form["message"] == " "
    assert [e.field for e in result.errors] == ["message"]
    assert repo.grams == {}
    assert storage.saved == {}


async def test_create_without_payload_reports_both_fields():
    handler, _, _ = _handler()
    result = await handler.handle(RequestContext(action=GramAction.CREATE, principal=OWNER))
    assert result.status == 422
    assert {e.field for e in result.errors} == {"message", "picture"}


async def test_create_removes_stored_picture_when_store_fails():
    handler, _, storage = _handler(repo=FakeGramRepository(fail_on="create"))
    with pytest.raises(RuntimeError):
        await handler.handle(RequestContext(
            action=GramAction.CREATE, principal=OWNER,
            payload=GramPayload(message="Hello!", picture=PNG),
        ))
    assert storage.saved == {}
    assert len(storage.deleted) == 1


# ─── update ──────────────────────────────────────────────────────

async def test_update_changes_message_and_keeps_picture():
    handler, repo, storage = _handler()
    gram = repo.add(OWNER, message="initial value", picture="old.png")
    result = await handler.handle(RequestContext(
        action=GramAction.UPDATE, principal=OWNER, gram_id=str(gram.id),
        payload=GramPayload(message="changed"),
    ))
    assert result.redirect is RedirectTarget.ROOT
    assert gram.message == "changed"
    assert gram.picture == "old.png"
    assert storage.deleted == []


async def test_update_with_new_picture_replaces_old_one():
    handler, repo, storage = _handler()
    gram = repo.add(OWNER, picture="old.png")
    await handler.handle(RequestContext(
        action=GramAction.UPDATE, principal=OWNER, gram_id=str(gram.id),
        payload=GramPayload(picture=PNG),
    ))
    assert gram.picture != "old.png"
    assert gram.picture in storage.saved
    assert storage.deleted == ["old.png"]


async def test_update_whitespace_message_leaves_record_untouched():
    handler, repo, storage = _handler()
    gram = repo.add(OWNER, message="initial value")
    result = await handler.handle(RequestContext(
        action=GramAction.UPDATE, principal=OWNER, gram_id=str(gram.id),
        payload=GramPayload(message=" ", picture=PNG),
    ))
    assert result.status == 422
    assert result.view is GramView.EDIT
    assert result.form["message"] == " "
    assert gram.message == "initial value"
    assert "update" not in repo.calls
    assert storage.saved == {}


async def test_update_empty_message_is_blank_not_absent():
    handler, repo, _ = _handler()
    gram = repo.add(OWNER, message="initial value")
    result = await handler.handle(RequestContext(
        action=GramAction.UPDATE, principal=OWNER, gram_id=str(gram.id),
        payload=GramPayload(message=""),
    ))
    assert result.status == 422
    assert [e.message for e in result.errors] == ["can't be blank"]
    assert gram.message == "initial value"


async def test_update_redirects_when_old_picture_cannot_be_removed(caplog):
    handler, repo, storage = _handler(storage=BrokenDeleteStorage())
    gram = repo.add(OWNER, picture="old.png")
    with caplog.at_level("WARNING", logger="app.services.handle_grams"):
        result = await handler.handle(RequestContext(
            action=GramAction.UPDATE, principal=OWNER, gram_id=str(gram.id),
            payload=GramPayload(picture=PNG),
        ))
    assert result.redirect is RedirectTarget.ROOT
    assert gram.picture in storage.saved
    assert storage.deleted == ["old.png"]
    (record,) = [r for r in caplog.records if "left behind" in r.getMessage()]
    assert record.gram_id == str(gram.id)


async def test_create_failure_keeps_store_error_when_cleanup_fails():
    handler, _, _ = _handler(
        repo=FakeGramRepository(fail_on="create"), storage=BrokenDeleteStorage(),
    )
    with pytest.raises(RuntimeError, match="store failure in create"):
        await handler.handle(RequestContext(
            action=GramAction.CREATE, principal=OWNER,
            payload=GramPayload(message="Hello!", picture=PNG),
        ))


async def test_update_rejects_non_image_picture():
    handler, repo, _ = _handler()
    gram = repo.add(OWNER)
    result = await handler.handle(RequestContext(
        action=GramAction.UPDATE, principal=OWNER, gram_id=str(gram.id),
        payload=GramPayload(picture=PictureUpload("notes.txt", "text/plain", b"hi")),
    ))
    assert result.status == 422
    assert [e.field for e in result.errors] == ["picture"]


# ─── destroy ─────────────────────────────────────────────────────

async def test_destroy_removes_record_and_picture():
    handler, repo, storage = _handler()
    gram = repo.add(OWNER, picture="a.png")
    result = await handler.handle(RequestContext(
        action=GramAction.DESTROY, principal=OWNER, gram_id=str(gram.id),
    ))
    assert result.redirect is RedirectTarget.ROOT
    assert gram.id not in repo.grams
    assert storage.deleted == ["a.png"]


async def test_destroy_redirects_when_picture_cannot_be_removed(caplog):
    handler, repo, storage = _handler(storage=BrokenDeleteStorage())
    gram = repo.add(OWNER, picture="a.png")
    with caplog.at_level("WARNING", logger="app.services.handle_grams"):
        result = await handler.handle(RequestContext(
            action=GramAction.DESTROY, principal=OWNER, gram_id=str(gram.id),
        ))
    assert result.redirect is RedirectTarget.ROOT
    assert gram.id not in repo.grams
    assert storage.deleted == ["a.png"]
    assert any(
        getattr(r, "gram_id", None) == str(gram.id) for r in caplog.records
        if r.levelname == "WARNING"
    )


async def test_repeated_destroy_reports_not_found():
    handler, repo, _ = _handler()
    gram = repo.add(OWNER)
    ctx = RequestContext(action=GramAction.DESTROY, principal=OWNER, gram_id=str(gram.id))
    await handler.handle(ctx)
    with pytest.raises(ResourceNotFoundError):
        await handler.handle(ctx)


# ─── index paging ────────────────────────────────────────────────

async def test_index_pages_newest_first():
    handler, repo, _ = _handler()
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    for i in range(3):
        repo.add(OWNER, message=f"gram {i}").created_at = base + timedelta(minutes=i)
    result = await handler.handle(RequestContext(
        action=GramAction.INDEX, limit=2, offset=0,
    ))
    assert [g.message for g in result.grams] == ["gram 2", "gram 1"]
    assert (result.total, result.limit, result.offset) == (3, 2, 0)
