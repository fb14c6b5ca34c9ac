"""
Сценарии диалога выбора группы и модерации заявок.
"""

import pytest

from application.usecases import group_dialogue as texts
from conftest import ADMIN_ID, STUDENT_ID, button_event, message_event, run
from domain.errors import StorageError
from domain.models.dialogue import Acknowledge, DialogueStep, EditMessage, SendMessage
from domain.models.groups import RequestStatus
from domain.models.users import UserRole


def _tokens(keyboard):
    return [button.token for row in keyboard for button in row]


def _labels(keyboard):
    return [button.label for row in keyboard for button in row]


def _row_tokens(row):
    return [button.token for button in row]


def _row_labels(row):
    return [button.label for button in row]


def _step(sessions, user_id=STUDENT_ID):
    return run(sessions.get(user_id)).step


@pytest.fixture
def twenty_groups(group_repo):
    return [group_repo.create(f"Group {i:02d}") for i in range(20)]


class TestGroupPicker:
    def test_start_shows_first_page(self, dialogue, sessions, user_repo, twenty_groups):
        [reply] = run(dialogue.start(message_event()))

        assert isinstance(reply, SendMessage)
        assert reply.text == texts.PICKER_TEXT
        group_rows = reply.keyboard[:-2]
        assert len(group_rows) == 8
        assert _row_labels(reply.keyboard[-2]) == ["Стр. 1/3", "▶️"]
        assert _row_tokens(reply.keyboard[-2]) == ["noop", "grp:page:1"]
        assert _row_tokens(reply.keyboard[-1]) == ["grp:req:new"]

        session = run(sessions.get(STUDENT_ID))
        assert session.step == DialogueStep.AWAIT_GROUP_PICK.state
        assert session.params == {"page": 0}
        assert user_repo.get_by_id(STUDENT_ID).name == "Test User"

    def test_next_page_edits_message(self, dialogue, sessions, twenty_groups):
        run(dialogue.start(message_event()))

        ack, edit = run(dialogue.handle_button(button_event(message_id=77), "grp:page:1"))

        assert isinstance(ack, Acknowledge) and ack.text is None
        assert isinstance(edit, EditMessage)
        assert edit.message_id == 77
        assert _row_labels(edit.keyboard[0]) == ["Group 08"]
        assert _row_labels(edit.keyboard[-2]) == ["◀️", "Стр. 2/3", "▶️"]
        assert run(sessions.get(STUDENT_ID)).params == {"page": 1}

    def test_last_page_has_no_next_arrow(self, dialogue, twenty_groups):
        _, edit = run(dialogue.handle_button(button_event(), "grp:page:2"))

        assert _row_tokens(edit.keyboard[-2]) == ["grp:page:1", "noop"]
        assert len(edit.keyboard[:-2]) == 4

    def test_start_mentions_current_group(self, dialogue, group_repo, user_repo):
        group = group_repo.create("Math101")
        user_repo.set_group(STUDENT_ID, group.id)

        [reply] = run(dialogue.start(message_event()))

        assert reply.text.startswith("Текущая группа: <b>Math101</b>")

    def test_pick_button_assigns_group_from_any_state(
        self, dialogue, sessions, user_repo, group_repo
    ):
        group = group_repo.create("Math101")
        run(sessions.set(STUDENT_ID, DialogueStep.AWAIT_GROUP_NAME_FOR_REQUEST))

        ack, reply = run(dialogue.handle_button(button_event(), f"grp:pick:{group.id}"))

        assert ack == Acknowledge("cb-100", texts.GROUP_CHOSEN_ACK_TEXT)
        assert reply.text == "Группа сохранена: Math101 ✅"
        assert user_repo.get_by_id(STUDENT_ID).group_id == group.id
        assert _step(sessions) is None

    def test_pick_button_for_missing_group(self, dialogue, user_repo):
        [ack] = run(dialogue.handle_button(button_event(), "grp:pick:999"))

        assert ack.text == texts.GROUP_NOT_FOUND_TEXT
        assert ack.alert
        assert user_repo.get_by_id(STUDENT_ID) is None

    def test_noop_and_garbage_buttons_are_only_acknowledged(self, dialogue, sessions):
        assert run(dialogue.handle_button(button_event(), "noop")) == [Acknowledge("cb-100")]
        assert run(dialogue.handle_button(button_event(), "grp:page:abc")) == [
            Acknowledge("cb-100")
        ]
        assert _step(sessions) is None


class TestTextResolution:
    @pytest.fixture(autouse=True)
    def picking(self, dialogue, group_repo):
        for name in ["Math101", "Math102", "Biology"]:
            group_repo.create(name)
        run(dialogue.start(message_event()))

    def test_many_matches_show_disambiguation_keyboard(self, dialogue, sessions):
        [reply] = run(dialogue.handle_text(message_event(), "Math"))

        assert reply.text == texts.MANY_MATCHES_TEXT
        assert _labels(reply.keyboard) == ["Math101", "Math102", "➕ Добавить группу"]
        assert _tokens(reply.keyboard)[-1] == "grp:req:new"
        assert _step(sessions) == DialogueStep.AWAIT_GROUP_PICK.state

    def test_exact_match_assigns_group(self, dialogue, sessions, user_repo, group_repo):
        [reply] = run(dialogue.handle_text(message_event(), "  math101 "))

        assert reply.text == "Группа выбрана: Math101 ✅"
        assigned = group_repo.get_by_id(user_repo.get_by_id(STUDENT_ID).group_id)
        assert assigned.name == "Math101"
        assert _step(sessions) is None

    def test_single_match_assigns_group(self, dialogue, sessions):
        [reply] = run(dialogue.handle_text(message_event(), "bio"))

        assert reply.text == "Группа выбрана: Biology ✅"
        assert _step(sessions) is None

    def test_long_group_name_is_still_found_by_text(self, dialogue, group_repo, user_repo):
        long_name = "Applied Mathematics and Computer Science, evening department, 2026"
        group = group_repo.create(long_name)

        [reply] = run(dialogue.handle_text(message_event(), long_name.upper()))

        assert reply.text == f"Группа выбрана: {long_name} ✅"
        assert user_repo.get_by_id(STUDENT_ID).group_id == group.id

    def test_no_match_suggests_adding(self, dialogue, sessions):
        [reply] = run(dialogue.handle_text(message_event(), "History"))

        assert reply.text == texts.NO_MATCH_TEXT
        assert _step(sessions) == DialogueStep.AWAIT_GROUP_PICK.state

    def test_too_short_text_is_rejected_before_search(self, dialogue, sessions):
        [reply] = run(dialogue.handle_text(message_event(), " M "))

        assert reply.text == texts.NAME_TOO_SHORT_TEXT
        assert _step(sessions) == DialogueStep.AWAIT_GROUP_PICK.state

    def test_commands_are_ignored(self, dialogue):
        assert run(dialogue.handle_text(message_event(), "/whatever")) == []


def test_text_without_dialogue_is_ignored(dialogue, group_repo):
    group_repo.create("Math101")

    assert run(dialogue.handle_text(message_event(), "Math101")) == []


class TestGroupRequestSubmission:
    @pytest.fixture(autouse=True)
    def asking_name(self, dialogue):
        ack, prompt = run(dialogue.handle_button(button_event(), "grp:req:new"))
        assert prompt.text == texts.ASK_GROUP_NAME_TEXT

    def test_request_is_created(self, dialogue, sessions, ledger):
        [reply] = run(dialogue.handle_text(message_event(), " Biology "))

        assert reply.text == texts.REQUEST_SENT_TEXT
        assert ledger.pending_exists("biology")
        assert _step(sessions) is None

    def test_short_name_keeps_waiting(self, dialogue, sessions, ledger):
        [reply] = run(dialogue.handle_text(message_event(), "B"))

        assert reply.text == texts.NAME_TOO_SHORT_TEXT
        assert _step(sessions) == DialogueStep.AWAIT_GROUP_NAME_FOR_REQUEST.state
        assert ledger.list_pending_page(0, 8).total == 0

    def test_long_name_keeps_waiting(self, dialogue, sessions):
        [reply] = run(dialogue.handle_text(message_event(), "x" * 65))

        assert reply.text == texts.NAME_TOO_LONG_TEXT
        assert _step(sessions) == DialogueStep.AWAIT_GROUP_NAME_FOR_REQUEST.state

    def test_existing_group_is_not_requested(self, dialogue, group_repo, ledger):
        group_repo.create("CS101")

        [reply] = run(dialogue.handle_text(message_event(), "cs101"))

        assert reply.text == texts.GROUP_EXISTS_TEXT
        assert ledger.list_pending_page(0, 8).total == 0

    def test_pending_duplicate_is_not_created(self, dialogue, ledger):
        ledger.create("555", "Biology")

        [reply] = run(dialogue.handle_text(message_event(), "BIOLOGY"))

        assert reply.text == texts.REQUEST_PENDING_TEXT
        assert ledger.list_pending_page(0, 8).total == 1

    def test_storage_duplicate_signal_is_reported_as_pending(
        self, dialogue, ledger, monkeypatch
    ):
        ledger.create("555", "Biology")
        # Быстрая проверка «не видит» заявку, срабатывает ограничение хранилища
        monkeypatch.setattr(ledger, "pending_exists", lambda name: False)

        [reply] = run(dialogue.handle_text(message_event(), "Biology"))

        assert reply.text == texts.REQUEST_PENDING_TEXT


class TestModeration:
    @pytest.fixture
    def request_id(self, ledger):
        return ledger.create(STUDENT_ID, "Biology").id

    def test_non_admin_cannot_approve(self, dialogue, request_repo, request_id, sessions):
        run(sessions.set(STUDENT_ID, DialogueStep.AWAIT_GROUP_PICK, {"page": 0}))

        [ack] = run(dialogue.handle_button(button_event(), f"req:approve:{request_id}"))

        assert ack == Acknowledge("cb-100", texts.NO_RIGHTS_TEXT, alert=True)
        assert request_repo.get_by_id(request_id).status == RequestStatus.PENDING
        assert _step(sessions) == DialogueStep.AWAIT_GROUP_PICK.state

    @pytest.mark.parametrize("token", ["req:reject:1", "req:page:0"])
    def test_non_admin_cannot_reject_or_list(self, dialogue, request_repo, request_id, token):
        [ack] = run(dialogue.handle_button(button_event(), token))

        assert ack.text == texts.NO_RIGHTS_TEXT
        assert request_repo.get_by_id(request_id).status == RequestStatus.PENDING

    def test_role_is_checked_on_every_action(self, dialogue, user_repo, request_id):
        user_repo.set_role(STUDENT_ID, UserRole.ADMIN)
        [ack, _] = run(dialogue.handle_button(button_event(), "req:page:0"))
        assert ack.text is None

        user_repo.set_role(STUDENT_ID, UserRole.STUDENT)
        [ack] = run(dialogue.handle_button(button_event(), "req:page:0"))
        assert ack.text == texts.NO_RIGHTS_TEXT

    def test_admin_approves_and_requester_is_notified(
        self, dialogue, group_repo, request_repo, request_id
    ):
        ack, notice = run(
            dialogue.handle_button(button_event(ADMIN_ID), f"req:approve:{request_id}")
        )

        assert ack == Acknowledge(f"cb-{ADMIN_ID}", texts.APPROVED_ACK_TEXT)
        assert notice == SendMessage(STUDENT_ID, 'Заявка на группу "Biology" принята ✅')
        assert group_repo.exists("Biology")
        assert request_repo.get_by_id(request_id).decided_by == ADMIN_ID

    def test_double_approve_notifies_once(self, dialogue, request_id):
        run(dialogue.handle_button(button_event(ADMIN_ID), f"req:approve:{request_id}"))

        second = run(
            dialogue.handle_button(button_event(ADMIN_ID), f"req:approve:{request_id}")
        )

        assert second == [Acknowledge(f"cb-{ADMIN_ID}", texts.ALREADY_HANDLED_TEXT)]

    def test_admin_rejects(self, dialogue, group_repo, request_id):
        ack, notice = run(
            dialogue.handle_button(button_event(ADMIN_ID), f"req:reject:{request_id}")
        )

        assert ack.text == texts.REJECTED_ACK_TEXT
        assert notice.chat_id == STUDENT_ID
        assert notice.text == 'Заявка на группу "Biology" отклонена ❌'
        assert not group_repo.exists("Biology")

    def test_approve_when_group_added_independently(
        self, dialogue, group_repo, request_repo, request_id
    ):
        group_repo.create("Biology")

        ack, _ = run(
            dialogue.handle_button(button_event(ADMIN_ID), f"req:approve:{request_id}")
        )

        assert ack.text == texts.APPROVED_ACK_TEXT
        assert request_repo.get_by_id(request_id).status == RequestStatus.APPROVED
        assert group_repo.count() == 1

    def test_requests_page_lists_pending(self, dialogue, request_id):
        ack, edit = run(dialogue.handle_button(button_event(ADMIN_ID), "req:page:0"))

        assert ack == Acknowledge(f"cb-{ADMIN_ID}")
        assert isinstance(edit, EditMessage)
        assert edit.text == texts.REQUESTS_TEXT
        assert _row_labels(edit.keyboard[0]) == ["📌 Biology"]
        assert _row_tokens(edit.keyboard[1]) == [
            f"req:approve:{request_id}",
            f"req:reject:{request_id}",
        ]
        assert _row_tokens(edit.keyboard[2]) == ["noop"]

    def test_open_requests_command(self, dialogue, request_id):
        [reply] = run(dialogue.open_requests(message_event(ADMIN_ID)))

        assert isinstance(reply, SendMessage)
        assert reply.text == texts.REQUESTS_TEXT

        [denied] = run(dialogue.open_requests(message_event(STUDENT_ID)))
        assert denied.text == texts.NO_RIGHTS_TEXT

    def test_empty_queue(self, dialogue):
        [reply] = run(dialogue.open_requests(message_event(ADMIN_ID)))

        assert _labels(reply.keyboard) == ["Пусто"]


def test_transitions_do_not_touch_other_users(dialogue, sessions, group_repo):
    group_repo.create("Math101")
    run(sessions.set("200", DialogueStep.AWAIT_GROUP_NAME_FOR_REQUEST, {"x": 1}))

    run(dialogue.start(message_event()))
    run(dialogue.handle_text(message_event(), "Math101"))

    other = run(sessions.get("200"))
    assert other.step == DialogueStep.AWAIT_GROUP_NAME_FOR_REQUEST.state
    assert other.params == {"x": 1}


def test_storage_errors_propagate(dialogue, group_repo, monkeypatch):
    def broken(*args, **kwargs):
        raise StorageError("sheet is down")

    monkeypatch.setattr(group_repo, "list_active", broken)

    with pytest.raises(StorageError):
        run(dialogue.start(message_event()))
