from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from churchsite import api
from churchsite.records import AnnouncementRecord, Attachment, EventRecord, MessageRecord
from churchsite.utils import localnow

PDF_BYTES = b"%PDF-1.4\n% bulletin\n"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def _message_form(**overrides) -> dict:
    data = {
        "title": "Walking in Love",
        "code": "WL",
        "date": "2024-03-10",
        "author": "Pastor James",
        "description": "Love in practice",
    }
    data.update(overrides)
    return data


def _event_form(**overrides) -> dict:
    data = {
        "title": "Choir Concert",
        "date": "2024-12-20T19:00",
        "venue": "Main Sanctuary",
        "description": "Carols",
    }
    data.update(overrides)
    return data


def _create_message(stores, **extra) -> MessageRecord:
    values = {
        "title": "Hope in Trials",
        "code": "HT",
        "date": datetime(2023, 9, 24),
        "author": "Pastor James",
        "description": "Finding hope",
    }
    values.update(extra)
    return stores.messages.create(MessageRecord(**values))


def test_homepage_renders_latest_messages_and_announcements(client, stores):
    for day in range(1, 5):
        _create_message(stores, title=f"Message {day}", date=datetime(2024, 1, day))
    stores.announcements.create(AnnouncementRecord(title="Potluck Sunday", content="Bring food"))

    response = client.get("/")

    assert response.status_code == 200
    assert "Message 4" in response.text
    assert "Message 1" not in response.text
    assert "Potluck Sunday" in response.text
    assert "View all 4 messages" in response.text


def test_homepage_warns_when_using_temporary_storage(fallback_stores):
    api.app.dependency_overrides[api.get_stores] = lambda: fallback_stores
    try:
        with TestClient(api.app) as test_client:
            response = test_client.get("/")
    finally:
        api.app.dependency_overrides.clear()

    assert response.status_code == 200
    assert "temporary storage" in response.text


def test_offset_dates_keep_temporary_storage_pages_working(fallback_stores):
    api.app.dependency_overrides[api.get_stores] = lambda: fallback_stores
    try:
        with TestClient(api.app) as test_client:
            login = test_client.post(
                "/admin-login",
                data={"userId": "Admin", "password": "admin123"},
                follow_redirects=False,
            )
            assert login.status_code == 303
            uploaded = test_client.post(
                "/upload",
                data=_message_form(date="2024-01-11T10:00+02:00"),
                files={"messageFile": ("love.pdf", PDF_BYTES, "application/pdf")},
                follow_redirects=False,
            )
            created = test_client.post(
                "/create-announcement",
                data={"title": "Retreat", "content": "Sign up", "expiresAt": "2099-01-01T00:00Z"},
                follow_redirects=False,
            )
            pages = [test_client.get(path) for path in ("/", "/messages", "/active-announcements")]
    finally:
        api.app.dependency_overrides.clear()

    assert uploaded.status_code == 303
    assert created.status_code == 303
    assert [page.status_code for page in pages] == [200, 200, 200]
    [message] = fallback_stores.messages.find_all()
    assert message.date.tzinfo is None
    [announcement] = fallback_stores.announcements.find_all()
    assert announcement.expires_at.tzinfo is None
    assert "Retreat" in pages[2].text


def test_messages_page_lists_featured_first(client, stores):
    _create_message(stores, title="Newest", date=datetime(2024, 5, 1))
    featured = _create_message(stores, title="Pinned", date=datetime(2020, 1, 1))
    stores.messages.set_featured(featured.id)

    response = client.get("/messages")

    assert response.status_code == 200
    assert response.text.index("Pinned") < response.text.index("Newest")


def test_search_highlights_matches(client, stores):
    _create_message(stores, title="Grace and Peace")

    response = client.get("/search", params={"q": "grace"})

    assert response.status_code == 200
    assert '<span class="search-highlight">Grace</span>' in response.text
    assert "1 message found" in response.text


def test_blank_search_redirects_to_messages(client):
    response = client.get("/search", params={"q": "   "}, follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/messages"


def test_events_page_shows_status(client, stores):
    now = localnow()
    stores.events.create(
        EventRecord(
            title="Today Prayer",
            date=now.replace(hour=0, minute=0, second=0, microsecond=0),
            venue="Chapel",
            description="Pray",
        )
    )

    response = client.get("/events")

    assert "Today Prayer" in response.text
    assert "ongoing" in response.text


def test_active_announcements_json_caps_at_three(client, stores):
    for index in range(5):
        stores.announcements.create(
            AnnouncementRecord(title=f"Notice {index}", content="Body")
        )
    stores.announcements.create(
        AnnouncementRecord(
            title="Expired", content="Body", expires_at=localnow() - timedelta(days=1)
        )
    )

    payload = client.get("/active-announcements").json()

    assert len(payload) == 3
    assert all(item["title"] != "Expired" for item in payload)
    assert {"priority", "type", "background_color", "expires_at"} <= set(payload[0])


def test_pdf_is_served_inline(client, stores):
    message = _create_message(
        stores,
        pdf_file=Attachment.from_bytes(
            PDF_BYTES, content_type="application/pdf", filename="hope.pdf"
        ),
    )

    response = client.get(f"/pdf/{message.id}")

    assert response.status_code == 200
    assert response.content == PDF_BYTES
    assert response.headers["content-type"] == "application/pdf"
    assert 'inline; filename="hope.pdf"' in response.headers["content-disposition"]


def test_pdf_missing_attachment_is_404(client, stores):
    message = _create_message(stores)

    response = client.get(f"/pdf/{message.id}")

    assert response.status_code == 404
    assert "No PDF available for this message" in response.text


def test_unknown_message_preview_is_404(client):
    assert client.get("/preview/nope").status_code == 404


def test_announcement_image_placeholder(client):
    response = client.get("/announcement-image/unknown")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert "No Image" in response.text


@pytest.mark.parametrize(
    "path",
    ["/admin", "/admin-events", "/admin-announcements", "/messages-data", "/edit/1"],
)
def test_admin_pages_redirect_to_login(client, path):
    response = client.get(path, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/admin-login"


def test_admin_mutation_requires_login(client, stores):
    message = _create_message(stores)

    response = client.post(f"/delete/{message.id}", follow_redirects=False)

    assert response.status_code == 303
    assert stores.messages.find_by_id(message.id)


def test_login_rejects_wrong_password(client):
    response = client.post("/admin-login", data={"userId": "Admin", "password": "nope"})

    assert response.status_code == 401
    assert "Invalid password" in response.text


def test_logout_clears_session(admin_client):
    admin_client.get("/admin-logout")

    response = admin_client.get("/admin", follow_redirects=False)
    assert response.status_code == 303


def test_upload_message_with_pdf(admin_client, stores):
    response = admin_client.post(
        "/upload",
        data=_message_form(),
        files={"messageFile": ("love.pdf", PDF_BYTES, "application/pdf")},
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"].startswith("/admin?success=")
    [message] = stores.messages.find_all()
    assert message.title == "Walking in Love"
    assert message.date == datetime(2024, 3, 10)
    assert message.pdf_file.filename == "love.pdf"


def test_upload_message_missing_field_is_400(admin_client, stores):
    response = admin_client.post("/upload", data=_message_form(author=""))

    assert response.status_code == 400
    assert "required fields" in response.text
    assert stores.messages.find_all() == []


def test_upload_message_rejects_non_pdf(admin_client, stores):
    response = admin_client.post(
        "/upload",
        data=_message_form(),
        files={"messageFile": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 415
    assert "Only PDF files are allowed" in response.text
    assert stores.messages.find_all() == []


def test_upload_message_rejects_oversized_pdf(admin_client, stores, monkeypatch):
    monkeypatch.setattr(api, "settings", replace(api.settings, max_pdf_bytes=8))

    response = admin_client.post(
        "/upload",
        data=_message_form(),
        files={"messageFile": ("big.pdf", PDF_BYTES, "application/pdf")},
    )

    assert response.status_code == 400
    assert "File too large" in response.text


def test_update_message_keeps_file_unless_removed(admin_client, stores):
    message = _create_message(
        stores,
        pdf_file=Attachment.from_bytes(
            PDF_BYTES, content_type="application/pdf", filename="keep.pdf"
        ),
    )

    admin_client.post(f"/update/{message.id}", data=_message_form(title="Edited"))
    edited = stores.messages.find_by_id(message.id)
    assert edited.title == "Edited"
    assert edited.pdf_file.filename == "keep.pdf"

    admin_client.post(f"/update/{message.id}", data=_message_form(removeFile="on"))
    assert stores.messages.find_by_id(message.id).pdf_file is None


def test_update_unknown_message_is_404(admin_client):
    response = admin_client.post("/update/missing", data=_message_form())

    assert response.status_code == 404
    assert "Message not found" in response.text


def test_feature_and_unfeature_message(admin_client, stores):
    first = _create_message(stores, title="First")
    second = _create_message(stores, title="Second")

    admin_client.post(f"/featured/{first.id}")
    admin_client.post(f"/featured/{second.id}")
    featured = [m.id for m in stores.messages.find_all() if m.featured]
    assert featured == [second.id]

    response = admin_client.post(f"/unfeature/{second.id}")
    assert response.json() == {"success": True}
    assert not any(m.featured for m in stores.messages.find_all())


def test_unfeature_unknown_message_is_json_404(admin_client):
    response = admin_client.post("/unfeature/missing")

    assert response.status_code == 404
    assert response.json() == {"error": "Message not found"}


def test_delete_message_twice(admin_client, stores):
    message = _create_message(stores)

    first = admin_client.post(f"/delete/{message.id}", follow_redirects=False)
    second = admin_client.post(f"/delete/{message.id}", follow_redirects=False)

    assert first.status_code == 303
    assert second.status_code == 404


def test_messages_data_is_newest_first(admin_client, stores):
    _create_message(stores, title="Older", date=datetime(2023, 1, 1))
    _create_message(stores, title="Newer", date=datetime(2024, 1, 1))

    payload = admin_client.get("/messages-data").json()

    assert [item["title"] for item in payload] == ["Newer", "Older"]
    assert payload[0]["pdf_file"] is None


def test_admin_search_filters_messages(admin_client, stores):
    _create_message(stores, title="Faith Alone")
    _create_message(stores, title="Works")

    response = admin_client.get("/admin-search", params={"q": "faith"})

    assert response.status_code == 200
    assert "Works" not in response.text
    assert "Faith" in response.text


def test_upload_event_with_optional_image(admin_client, stores):
    admin_client.post("/upload-event", data=_event_form(featured="on"))
    admin_client.post(
        "/upload-event",
        data=_event_form(title="Picnic", date="2024-07-04T12:00", endDate="2024-07-05T18:00"),
        files={"eventImage": ("park.png", PNG_BYTES, "image/png")},
    )

    events = {e.title: e for e in stores.events.find_all()}
    assert events["Choir Concert"].featured is True
    assert events["Choir Concert"].image_file is None
    assert events["Picnic"].end_date == datetime(2024, 7, 5, 18)
    assert events["Picnic"].image_file.content_type == "image/png"

    image = admin_client.get(f"/event-image/{events['Picnic'].id}")
    assert image.content == PNG_BYTES


def test_upload_event_rejects_non_image(admin_client, stores):
    response = admin_client.post(
        "/upload-event",
        data=_event_form(),
        files={"eventImage": ("doc.pdf", PDF_BYTES, "application/pdf")},
    )

    assert response.status_code == 415
    assert stores.events.find_all() == []


def test_event_image_missing_is_404(admin_client, stores):
    admin_client.post("/upload-event", data=_event_form())
    [event] = stores.events.find_all()

    response = admin_client.get(f"/event-image/{event.id}")

    assert response.status_code == 404


def test_update_event_remove_featured_and_image(admin_client, stores):
    admin_client.post(
        "/upload-event",
        data=_event_form(featured="on"),
        files={"eventImage": ("choir.png", PNG_BYTES, "image/png")},
    )
    [event] = stores.events.find_all()

    admin_client.post(
        f"/update-event/{event.id}",
        data=_event_form(featured="on", removeFeatured="on", removeImage="on"),
    )

    updated = stores.events.find_by_id(event.id)
    assert updated.featured is False
    assert updated.image_file is None


def test_events_data_is_soonest_first_with_status(admin_client, stores):
    admin_client.post("/upload-event", data=_event_form(title="Later", date="2030-05-01T10:00"))
    admin_client.post("/upload-event", data=_event_form(title="Earlier", date="2020-05-01T10:00"))

    payload = admin_client.get("/events-data").json()

    assert [item["title"] for item in payload] == ["Earlier", "Later"]
    assert [item["status"] for item in payload] == ["completed", "upcoming"]


def test_unfeature_and_delete_event(admin_client, stores):
    admin_client.post("/upload-event", data=_event_form(featured="on"))
    [event] = stores.events.find_all()

    assert admin_client.post(f"/unfeature-event/{event.id}").json() == {"success": True}
    assert stores.events.find_by_id(event.id).featured is False

    admin_client.post(f"/delete-event/{event.id}")
    assert stores.events.find_all() == []
    assert admin_client.post(f"/unfeature-event/{event.id}").status_code == 404


def test_create_announcement_applies_defaults(admin_client, stores):
    response = admin_client.post(
        "/create-announcement",
        data={"title": "Bake Sale", "content": "Sunday after service", "priority": "abc"},
        follow_redirects=False,
    )

    assert response.status_code == 303
    [announcement] = stores.announcements.find_all()
    assert announcement.priority == 3
    assert announcement.type == "announcement"
    assert announcement.background_color == "#000000dc"
    assert announcement.text_color == "#ffffff"
    assert announcement.active is True


def test_create_announcement_rejects_long_title(admin_client, stores):
    response = admin_client.post(
        "/create-announcement", data={"title": "x" * 101, "content": "Body"}
    )

    assert response.status_code == 400
    assert stores.announcements.find_all() == []


def test_create_announcement_rejects_non_hex_color(admin_client, stores):
    response = admin_client.post(
        "/create-announcement",
        data={
            "title": "Bake Sale",
            "content": "Sunday after service",
            "backgroundColor": "red; position:fixed; inset:0",
        },
    )

    assert response.status_code == 400
    assert "hex" in response.text
    assert stores.announcements.find_all() == []


def test_update_announcement_and_toggle(admin_client, stores):
    created = stores.announcements.create(
        AnnouncementRecord(title="Old title", content="Body", priority=2)
    )

    admin_client.post(
        f"/update-announcement/{created.id}",
        data={
            "title": "New title",
            "content": "New body",
            "priority": "5",
            "type": "banner",
            "active": "on",
            "expiresAt": "2099-01-01T00:00",
        },
    )
    updated = stores.announcements.find_by_id(created.id)
    assert (updated.title, updated.priority, updated.type) == ("New title", 5, "banner")
    assert updated.expires_at == datetime(2099, 1, 1)

    admin_client.post(f"/toggle-announcement/{created.id}")
    assert stores.announcements.find_by_id(created.id).active is False

    payload = admin_client.get("/announcements-data").json()
    assert payload[0]["active"] is False


def test_edit_announcement_page_embeds_record(admin_client, stores):
    created = stores.announcements.create(
        AnnouncementRecord(title="Choir Practice", content="Thursday")
    )

    response = admin_client.get(f"/edit-announcement/{created.id}")

    assert response.status_code == 200
    assert "Choir Practice" in response.text
    assert "data-announcement=" in response.text


def test_delete_announcement(admin_client, stores):
    created = stores.announcements.create(AnnouncementRecord(title="Gone", content="Soon"))

    admin_client.post(f"/delete-announcement/{created.id}")

    assert stores.announcements.find_all() == []
    response = admin_client.post(f"/delete-announcement/{created.id}")
    assert response.status_code == 404


def test_admin_pages_render_after_login(admin_client, stores):
    _create_message(stores)
    stores.events.create(
        EventRecord(title="Retreat", date=datetime(2024, 4, 1), venue="Lake", description="Rest")
    )
    created = stores.announcements.create(AnnouncementRecord(title="Welcome", content="Hi"))

    for path in (
        "/admin",
        "/admin-events",
        "/admin-announcements",
        "/create-announcement",
        f"/edit-announcement/{created.id}",
    ):
        assert admin_client.get(path).status_code == 200
