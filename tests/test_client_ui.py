import pytest
from fastapi.testclient import TestClient

from plans_api.client import PlansAPIError, PlansClient
from plans_api.identifiers import Pending, Persisted
from plans_api.main import create_app
from plans_api.repositories import InMemoryRepository
from plans_api.ui import PlanCardState, PlanDraft, PlansBoard, ToggleState, render_card, render_grid
from plans_api.ui.draft import CREATE_FAILED_MESSAGE, EMPTY_DRAFT_MESSAGE, cap_input
from plans_api.ui.grid import EMPTY_STATE, format_date


@pytest.fixture
def api():
    return PlansClient(http_client=TestClient(create_app(repository=InMemoryRepository())))


class FailingClient:
    """Client double whose every call fails like an unreachable server."""

    def __init__(self):
        self.calls = []

    def _fail(self, name, *args):
        self.calls.append((name, args))
        raise PlansAPIError(f"Failed to {name}", status_code=500)

    def get_plans(self):
        self._fail("get_plans")

    def create_plan(self, plan):
        self._fail("create_plan", plan)

    def update_plan(self, plan_id, plan):
        self._fail("update_plan", plan_id, plan)

    def delete_plan(self, plan_id):
        self._fail("delete_plan", plan_id)


class TestPlansClient:
    def test_health(self, api):
        assert api.health() == {"status": "ok"}

    def test_crud(self, api):
        created = api.create_plan({"title": "Groceries", "todos": [{"text": "Milk"}], "notes": []})
        assert api.get_plan(created["id"]) == created
        assert [p["id"] for p in api.get_plans()] == [created["id"]]

        updated = api.update_plan(created["id"], {"title": "Weekly"})
        assert updated["title"] == "Weekly"
        assert updated["todos"] == created["todos"]

        assert api.delete_plan(created["id"]) == {"message": "Plan deleted", "id": created["id"]}
        assert api.get_plans() == []

    def test_create_surfaces_server_message(self, api):
        with pytest.raises(PlansAPIError) as excinfo:
            api.create_plan({"todos": [], "notes": []})
        assert excinfo.value.status_code == 400
        assert excinfo.value.message == "Plan must have at least one todo or note"

    def test_other_failures_use_static_message(self, api):
        with pytest.raises(PlansAPIError) as excinfo:
            api.get_plan("not-an-id")
        assert excinfo.value.status_code == 404
        assert excinfo.value.message == "Failed to fetch plan"

        with pytest.raises(PlansAPIError) as excinfo:
            api.delete_plan("0" * 24)
        assert excinfo.value.message == "Failed to delete plan"

    def test_base_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("PLANS_API_URL", "http://plans.test/")
        with PlansClient() as configured:
            assert configured._client.base_url.host == "plans.test"

    def test_unreachable_server(self):
        with PlansClient(base_url="http://127.0.0.1:9", timeout=0.5) as unreachable:
            with pytest.raises(PlansAPIError) as excinfo:
                unreachable.get_plans()
        assert excinfo.value.status_code is None
        assert excinfo.value.message == "Failed to fetch plans"


class TestPlanDraft:
    def test_typed_input_is_capped(self):
        draft = PlanDraft()
        draft.set_title("t" * 150)
        draft.set_todo_text("x" * 200)
        draft.set_note_text("n" * 400)
        assert len(draft.title) == 100
        assert len(draft.todo_text) == 150
        assert len(draft.note_text) == 300
        assert cap_input("abc", 2) == "ab"

    def test_add_items_trims_and_ignores_blank(self):
        draft = PlanDraft()
        assert draft.add_todo("   ") is None
        assert draft.add_note("") is None
        todo = draft.add_todo("  Milk  ")
        assert todo.text == "Milk"
        assert isinstance(todo.id, Pending)
        assert draft.add_todo("x" * 151) is None
        assert draft.add_todo("\U0001F34E" * 76) is None
        assert [t.text for t in draft.todos] == ["Milk"]

    def test_add_from_typed_input_clears_it(self):
        draft = PlanDraft()
        draft.set_todo_text("Bread")
        draft.add_todo()
        draft.set_note_text("Wholegrain")
        draft.add_note()
        assert draft.todo_text == ""
        assert draft.note_text == ""
        assert [t.text for t in draft.todos] == ["Bread"]
        assert [n.text for n in draft.notes] == ["Wholegrain"]

    def test_remove_and_toggle_by_local_id(self):
        draft = PlanDraft()
        milk = draft.add_todo("Milk")
        eggs = draft.add_todo("Eggs")
        note = draft.add_note("Cheap")
        assert milk.id != eggs.id
        draft.toggle_todo(eggs.id)
        draft.remove_todo(milk.id)
        draft.remove_note(note.id)
        assert [(t.text, t.completed) for t in draft.todos] == [("Eggs", True)]
        assert draft.notes == []

    def test_payload_has_no_local_ids(self):
        draft = PlanDraft()
        draft.set_title("  Groceries  ")
        draft.add_todo("Milk")
        draft.add_note("Cheap")
        assert draft.to_payload() == {
            "title": "Groceries",
            "todos": [{"text": "Milk", "completed": False}],
            "notes": [{"text": "Cheap"}],
        }

    def test_empty_draft_cannot_save(self, api):
        draft = PlanDraft(title="Nothing yet")
        assert not draft.can_save
        assert draft.save(api) is None
        assert draft.last_error == EMPTY_DRAFT_MESSAGE
        assert api.get_plans() == []

    def test_save_creates_and_resets(self, api):
        draft = PlanDraft()
        draft.add_todo("Milk")
        created = draft.save(api)
        assert created["todos"][0]["text"] == "Milk"
        assert created["title"] is None
        assert draft.todos == [] and draft.title == "" and draft.last_error is None

    def test_failed_save_keeps_draft(self):
        draft = PlanDraft(title="Keep me")
        draft.add_todo("Milk")
        client = FailingClient()
        assert draft.save(client) is None
        assert len(client.calls) == 1
        assert draft.last_error == CREATE_FAILED_MESSAGE
        assert draft.title == "Keep me"
        assert [t.text for t in draft.todos] == ["Milk"]

    def test_edit_stored_plan_keeps_persisted_ids(self, api):
        created = api.create_plan({"title": "Groceries", "todos": [{"text": "Milk"}], "notes": [{"text": "Cheap"}]})
        draft = PlanDraft.from_plan(created)
        assert draft.todos[0].id == Persisted(created["todos"][0]["id"])
        draft.add_todo("Eggs")
        payload = draft.to_payload()
        assert payload["todos"][0]["id"] == created["todos"][0]["id"]
        assert "id" not in payload["todos"][1]

        saved = draft.save(api)
        assert saved["id"] == created["id"]
        assert saved["todos"][0]["id"] == created["todos"][0]["id"]
        assert saved["notes"] == created["notes"]
        assert [t["text"] for t in saved["todos"]] == ["Milk", "Eggs"]


class TestPlanCardState:
    def test_toggle_commits(self, api):
        plan = api.create_plan({"todos": [{"text": "Milk"}, {"text": "Eggs"}], "notes": [{"text": "Cheap"}]})
        card = PlanCardState(plan)
        milk_id = plan["todos"][0]["id"]
        assert card.state_of(milk_id) is ToggleState.IDLE

        assert card.toggle_todo(api, milk_id) is ToggleState.COMMITTED
        assert card.todos[0]["completed"] is True
        assert card.todos[1]["completed"] is False
        assert card.updating is False

        stored = api.get_plan(plan["id"])
        assert [t["id"] for t in stored["todos"]] == [t["id"] for t in plan["todos"]]
        assert stored["todos"][0]["completed"] is True
        assert stored["notes"] == plan["notes"]

    def test_toggle_rolls_back_on_failure(self, api):
        plan = api.create_plan({"todos": [{"text": "Milk"}], "notes": []})
        card = PlanCardState(plan)
        todo_id = plan["todos"][0]["id"]
        client = FailingClient()

        assert card.toggle_todo(client, todo_id) is ToggleState.ROLLED_BACK
        assert card.todos == plan["todos"]
        assert card.last_error == "Failed to update todo status"
        assert card.updating is False
        sent = client.calls[0][1][1]
        assert sent["todos"][0]["completed"] is True

    def test_toggle_ignored_while_updating(self):
        plan = {"id": "a" * 24, "title": None, "todos": [{"id": "b" * 24, "text": "Milk", "completed": False}], "notes": []}
        card = PlanCardState(plan)
        card.updating = True
        client = FailingClient()
        assert card.toggle_todo(client, "b" * 24) is ToggleState.IDLE
        assert client.calls == []
        assert card.todos[0]["completed"] is False

    def test_toggle_unknown_todo(self):
        card = PlanCardState({"id": "a" * 24, "todos": [], "notes": []})
        with pytest.raises(KeyError):
            card.toggle_todo(FailingClient(), "c" * 24)


class TestRendering:
    plan = {
        "id": "a" * 24,
        "title": "Groceries",
        "creationDate": "2025-01-25T10:15:30Z",
        "todos": [
            {"id": "1" * 24, "text": "Milk", "completed": True},
            {"id": "2" * 24, "text": "Eggs", "completed": False},
            {"id": "3" * 24, "text": "Bread", "completed": False},
        ],
        "notes": [{"id": "4" * 24, "text": "Cheap"}, {"id": "5" * 24, "text": "Fresh"}, {"id": "6" * 24, "text": "Local"}],
    }

    def test_format_date(self):
        assert format_date("2025-01-25T10:15:30Z") == "Jan 25, 2025, 10:15 AM"
        assert format_date("2025-07-04T21:05:00+00:00") == "Jul 4, 2025, 09:05 PM"

    def test_render_card_previews_two_items(self):
        assert render_card(self.plan).splitlines() == [
            "Groceries",
            "Jan 25, 2025, 10:15 AM",
            "Todos",
            "[x] Milk",
            "[ ] Eggs",
            "+1 more",
            "Notes",
            "Cheap, Fresh",
            "+1 more",
        ]

    def test_render_card_without_title_or_items(self):
        plan = {"id": "a" * 24, "title": None, "creationDate": "2025-01-25T10:15:30Z", "todos": [], "notes": []}
        assert render_card(plan) == "Jan 25, 2025, 10:15 AM"

    def test_render_grid(self):
        assert render_grid([]) == EMPTY_STATE
        assert render_grid([self.plan, self.plan]).count("Groceries") == 2


class TestPlansBoard:
    def test_load_save_delete(self, api):
        board = PlansBoard(api)
        assert board.load() is True
        assert board.render() == EMPTY_STATE

        first = PlanDraft()
        first.add_todo("Milk")
        second = PlanDraft(title="Second")
        second.add_note("Newest")
        created_first = board.save(first)
        created_second = board.save(second)
        assert [p["id"] for p in board.plans] == [created_second["id"], created_first["id"]]
        assert board.render().startswith("Second")

        assert board.delete(created_first["id"]) is True
        assert [p["id"] for p in board.plans] == [created_second["id"]]

        fresh = PlansBoard(api)
        fresh.load()
        assert [p["id"] for p in fresh.plans] == [created_second["id"]]

    def test_failures_set_error_and_keep_plans(self):
        board = PlansBoard(FailingClient())
        board.plans = [{"id": "a" * 24}]
        assert board.load() is False
        assert board.error == "Failed to load plans. Please try again."
        assert board.delete("a" * 24) is False
        assert board.error == "Failed to delete plan. Please try again."
        assert board.plans == [{"id": "a" * 24}]

        draft = PlanDraft()
        draft.add_todo("Milk")
        assert board.save(draft) is None
        assert board.error == CREATE_FAILED_MESSAGE
