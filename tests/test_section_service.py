from __future__ import annotations

import threading

import pytest
from sqlalchemy import event

from portfolio_api.domain.errors import (
    InvalidContentError,
    NotFoundError,
    OwnershipDeniedError,
    SlugUnavailableError,
)
from portfolio_api.domain.section_content import BUILTIN_TEMPLATES

SYSTEM_EMAIL = "templates@system.local"


@pytest.fixture()
def owner(make_account):
    return make_account("owner")


@pytest.fixture()
def intruder(make_account):
    return make_account("intruder")


def _resume_template(services, template_owner):
    content = {
        "type": "resume",
        "layout": "list",
        "isPublic": True,
        "fields": ["role", "summary"],
        "template": {"role": {"label": "Role", "required": True, "type": "text"}},
        "entries": [{"id": "entry_seed", "role": "Engineer", "tags": ["python"]}],
    }
    return services.sections.create(
        template_owner.id,
        {"title": "Resume Template", "type": "resume", "content": content},
    )


def test_create_derives_slug_and_next_order(services, owner):
    intro = services.sections.create(owner.id, {"title": "Intro"})
    projects = services.sections.create(owner.id, {"title": "Projects"})
    again = services.sections.create(owner.id, {"title": "Intro"})

    assert (intro.slug, intro.order) == ("intro", 1)
    assert (projects.slug, projects.order) == ("projects", 2)
    assert (again.slug, again.order) == ("intro-1", 3)
    assert again.is_public is True
    assert again.type == "custom"


def test_slugs_are_scoped_per_owner(services, owner, intruder):
    mine = services.sections.create(owner.id, {"title": "Intro"})
    theirs = services.sections.create(intruder.id, {"title": "Intro"})
    assert mine.slug == theirs.slug == "intro"


def test_create_with_explicit_slug(services, owner):
    section = services.sections.create(owner.id, {"title": "About", "slug": "About Me"})
    assert section.slug == "about-me"
    with pytest.raises(SlugUnavailableError):
        services.sections.create(owner.id, {"title": "Other", "slug": "about-me"})


def test_create_rejects_blank_title_and_mismatched_content(services, owner):
    with pytest.raises(InvalidContentError):
        services.sections.create(owner.id, {"title": "   "})
    with pytest.raises(InvalidContentError):
        services.sections.create(owner.id, {"title": "X", "type": "star-memo", "content": {"type": "certifications"}})


def test_known_type_gets_typed_defaults(services, owner):
    section = services.sections.create(owner.id, {"title": "Talks", "type": "speaking-engagements"})
    assert section.layout == "timeline"
    assert section.content["type"] == "speaking-engagements"
    assert section.content["entries"] == []


def test_non_owner_update_and_delete_are_denied(services, owner, intruder):
    section = services.sections.create(owner.id, {"title": "Intro"})

    with pytest.raises(OwnershipDeniedError):
        services.sections.update(section.id, intruder.id, {"title": "Hijacked"})
    with pytest.raises(OwnershipDeniedError):
        services.sections.delete(section.id, intruder.id)
    with pytest.raises(OwnershipDeniedError):
        services.sections.get(section.id, intruder.id)

    # Absent sections look exactly like foreign ones.
    with pytest.raises(OwnershipDeniedError):
        services.sections.update("does-not-exist", intruder.id, {"title": "x"})
    with pytest.raises(OwnershipDeniedError):
        services.sections.delete("does-not-exist", intruder.id)

    assert services.sections.get(section.id, owner.id).title == "Intro"


def test_update_is_partial(services, owner):
    section = services.sections.create(owner.id, {"title": "Intro", "description": "hello"})
    updated = services.sections.update(section.id, owner.id, {"title": "Welcome", "order": None})

    assert updated.title == "Welcome"
    assert updated.order == section.order
    assert updated.description == "hello"
    assert updated.slug == "intro"

    cleared = services.sections.update(section.id, owner.id, {"description": None})
    assert cleared.description is None


def test_update_slug_conflict(services, owner):
    services.sections.create(owner.id, {"title": "Intro"})
    other = services.sections.create(owner.id, {"title": "Projects"})
    with pytest.raises(SlugUnavailableError):
        services.sections.update(other.id, owner.id, {"slug": "intro"})


def test_delete_removes_section(services, owner):
    section = services.sections.create(owner.id, {"title": "Intro"})
    services.sections.delete(section.id, owner.id)
    assert services.sections.list(owner.id) == []


def test_reorder_applies_batch(services, owner):
    a = services.sections.create(owner.id, {"title": "A"})
    b = services.sections.create(owner.id, {"title": "B"})
    c = services.sections.create(owner.id, {"title": "C"})

    result = services.sections.reorder(owner.id, [(a.id, 3), {"id": b.id, "order": 1}, (c.id, 2)])
    assert [section.id for section in result] == [b.id, c.id, a.id]


def test_reorder_with_foreign_id_changes_nothing(services, owner, intruder):
    a = services.sections.create(owner.id, {"title": "A"})
    b = services.sections.create(owner.id, {"title": "B"})
    foreign = services.sections.create(intruder.id, {"title": "Theirs"})

    with pytest.raises(OwnershipDeniedError):
        services.sections.reorder(owner.id, [(a.id, 10), (b.id, 20), (foreign.id, 30)])

    assert {s.id: s.order for s in services.sections.list(owner.id)} == {a.id: 1, b.id: 2}
    assert services.sections.list(intruder.id)[0].order == 1


def test_reorder_with_unknown_id_changes_nothing(services, owner):
    a = services.sections.create(owner.id, {"title": "A"})
    with pytest.raises(OwnershipDeniedError):
        services.sections.reorder(owner.id, [(a.id, 5), ("missing", 6)])
    assert services.sections.get(a.id, owner.id).order == 1


def test_concurrent_reorders_never_interleave(services, owner):
    sections = [services.sections.create(owner.id, {"title": f"S{i}"}) for i in range(4)]
    ids = [section.id for section in sections]
    forward = {section_id: index for index, section_id in enumerate(ids, start=1)}
    backward = {section_id: len(ids) + 1 - order for section_id, order in forward.items()}
    errors = []
    barrier = threading.Barrier(2)

    def run(orders):
        barrier.wait()
        try:
            for _ in range(10):
                services.sections.reorder(owner.id, list(orders.items()))
        except Exception as exc:  # pragma: no cover - surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=run, args=(orders,)) for orders in (forward, backward)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    final = {section.id: section.order for section in services.sections.list(owner.id)}
    assert final in (forward, backward)


def test_concurrent_creates_get_distinct_slugs(services, owner):
    results = []
    errors = []
    barrier = threading.Barrier(5)

    def create():
        barrier.wait()
        try:
            results.append(services.sections.create(owner.id, {"title": "Intro", "order": 1}))
        except Exception as exc:  # pragma: no cover - surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=create) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    slugs = sorted(section.slug for section in results)
    assert len(set(slugs)) == 5
    assert set(slugs) == {"intro", "intro-1", "intro-2", "intro-3", "intro-4"}


def test_copy_template_into_empty_owner(services, owner, make_account):
    template = _resume_template(services, make_account("templates", SYSTEM_EMAIL))

    copy = services.sections.copy_template(owner.id, "resume", "My Resume")

    assert copy.user_id == owner.id
    assert copy.order == 1
    assert copy.slug == "my-resume"
    assert copy.is_public is True
    assert copy.type == "resume"
    assert copy.layout == "list"
    assert copy.content == template.content


def test_copied_content_is_independent(services, owner, make_account):
    template_owner = make_account("templates", SYSTEM_EMAIL)
    template = _resume_template(services, template_owner)
    copy = services.sections.copy_template(owner.id, "resume", "My Resume", description="Mine")

    services.sections.add_entry(copy.id, owner.id, {"role": "Lead"})
    services.sections.update_entry(copy.id, owner.id, "entry_seed", {"role": "Staff"})

    stored_template = services.sections.get(template.id, template_owner.id)
    assert stored_template.content == template.content
    assert stored_template.content["entries"] == [{"id": "entry_seed", "role": "Engineer", "tags": ["python"]}]
    assert services.sections.get(copy.id, owner.id).description == "Mine"


def test_copy_template_honours_private_default_and_missing_type(services, owner, make_account):
    template_owner = make_account("templates", SYSTEM_EMAIL)
    services.sections.create(
        template_owner.id,
        {"title": "Hidden", "type": "notes", "is_public": True, "content": {"isPublic": False, "layout": "compact"}},
    )
    copy = services.sections.copy_template(owner.id, "notes", "Notes")
    assert copy.is_public is False
    assert copy.layout == "compact"

    with pytest.raises(NotFoundError):
        services.sections.copy_template(owner.id, "does-not-exist", "Nope")


def test_own_sections_are_not_templates(services, owner):
    services.sections.create(owner.id, {"title": "Mine", "type": "resume"})
    with pytest.raises(NotFoundError):
        services.sections.copy_template(owner.id, "resume", "Copy")
    assert services.sections.template_types(owner.id) == []


def test_template_types_lists_template_account_types(services, owner, make_account):
    _resume_template(services, make_account("templates", SYSTEM_EMAIL))
    assert services.sections.template_types(owner.id) == ["resume"]


def test_list_public_filters_private_sections(services, owner):
    services.sections.create(owner.id, {"title": "Visible"})
    services.sections.create(owner.id, {"title": "Hidden", "is_public": False})
    assert [s.title for s in services.sections.list_public(owner.id)] == ["Visible"]


def test_entries_respect_template_and_limits(services, owner):
    content = dict(BUILTIN_TEMPLATES["certifications"]["content"], maxEntries=1)
    section = services.sections.create(owner.id, {"title": "Certs", "type": "certifications", "content": content})

    with pytest.raises(InvalidContentError):
        services.sections.add_entry(section.id, owner.id, {"name": "AWS"})

    entry = {"name": "AWS SA", "issuer": "Amazon", "date": "2024-01-01"}
    updated = services.sections.add_entry(section.id, owner.id, entry)
    stored = updated.content["entries"][0]
    assert stored["id"].startswith("entry_")
    assert stored["name"] == "AWS SA"

    with pytest.raises(InvalidContentError):
        services.sections.add_entry(section.id, owner.id, entry)

    removed = services.sections.remove_entry(section.id, owner.id, stored["id"])
    assert removed.content["entries"] == []
    with pytest.raises(NotFoundError):
        services.sections.remove_entry(section.id, owner.id, stored["id"])


def test_entries_require_ownership(services, owner, intruder):
    section = services.sections.create(owner.id, {"title": "Notes"})
    with pytest.raises(OwnershipDeniedError):
        services.sections.add_entry(section.id, intruder.id, {"text": "x"})


def test_private_sections_of_other_users_cannot_be_copied(services, owner, intruder):
    services.sections.create(
        owner.id,
        {"title": "Secrets", "is_public": False, "content": {"entries": [{"id": "e1", "secret": "my-ssn"}]}},
    )

    assert services.sections.template_types(intruder.id) == []
    with pytest.raises(NotFoundError):
        services.sections.copy_template(intruder.id, "custom", "Stolen")
    assert services.sections.list(intruder.id) == []


def test_public_sections_of_regular_users_are_not_templates(services, owner, intruder):
    services.sections.create(owner.id, {"title": "Public notes", "type": "notes"})
    with pytest.raises(NotFoundError):
        services.sections.copy_template(intruder.id, "notes", "Copy")


def test_private_sections_of_the_template_account_are_not_templates(services, owner, make_account):
    template_owner = make_account("templates", SYSTEM_EMAIL)
    services.sections.create(template_owner.id, {"title": "Draft", "type": "resume", "is_public": False})

    assert services.sections.template_types(owner.id) == []
    with pytest.raises(NotFoundError):
        services.sections.copy_template(owner.id, "resume", "My Resume")


def test_create_reads_visibility_from_content_when_not_given(services, owner):
    hidden = services.sections.create(owner.id, {"title": "Hidden", "content": {"isPublic": False}})
    forced = services.sections.create(owner.id, {"title": "Shown", "is_public": True, "content": {"isPublic": False}})

    assert hidden.is_public is False
    assert forced.is_public is True


def test_reorder_writes_rows_in_id_order(services, database, owner):
    sections = [services.sections.create(owner.id, {"title": f"S{i}"}) for i in range(4)]
    ids = {section.id for section in sections}
    written = []

    def capture(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("UPDATE CUSTOM_SECTIONS"):
            written.extend(value for value in parameters if value in ids)

    event.listen(database.engine, "before_cursor_execute", capture)
    try:
        batch = [(section.id, index) for index, section in enumerate(reversed(sections), start=1)]
        services.sections.reorder(owner.id, batch)
    finally:
        event.remove(database.engine, "before_cursor_execute", capture)

    assert written == sorted(ids)
