import pytest

from storedcmd.model import (
    CMD_MID,
    NUMBER_OF_ATS,
    NUMBER_OF_RTS,
    SUCCESS,
    AtsEntry,
    CmdStatus,
    Event,
    EventId,
    EventType,
    Message,
    Processor,
    RtsEntry,
    Services,
    StoredCommandApp,
)


@pytest.fixture
def app():
    return StoredCommandApp()


def test_fresh_app_counters_are_zero(app):
    assert app.hk.cmd_ctr == 0
    assert app.hk.ats_cmd_err_ctr == 0
    assert app.num_cmds_sec == 0
    assert app.events == []


def test_status_word_arrays_cover_all_rts(app):
    assert len(app.hk.rts_executing_status) * 16 >= NUMBER_OF_RTS
    assert len(app.hk.rts_disabled_status) == 4


def test_tables_sized(app):
    assert len(app.rts_info) == NUMBER_OF_RTS
    assert len(app.ats_info) == NUMBER_OF_ATS
    assert len(app.ats_cmd_status[0]) == 1000
    assert app.ats_cmd_status[1][0] == CmdStatus.EMPTY


def test_next_cmd_time_per_processor(app):
    assert app.next_cmd_time == {Processor.ATP: 0, Processor.RTP: 0}
    assert app.next_proc_number == Processor.NONE


def test_send_event_records(app):
    event = app.send_event(EventId.NOOP_INF, EventType.INFORMATION, "No-op")
    assert event == Event(EventId.NOOP_INF, EventType.INFORMATION, "No-op")
    assert app.events == [event]


def test_event_ids_in_order(app):
    app.send_event(EventId.ATS_DIST_ERR, EventType.ERROR, "a")
    app.send_event(EventId.ATS_ABT_ERR, EventType.ERROR, "b")
    assert app.event_ids() == [EventId.ATS_DIST_ERR, EventId.ATS_ABT_ERR]


def test_send_event_rejects_unknown_id(app):
    with pytest.raises(ValueError):
        app.send_event(9999, EventType.ERROR, "bad")


def test_current_ats_entry_follows_index_buffer(app):
    first = AtsEntry(cmd_number=1, message=Message(CMD_MID))
    second = AtsEntry(cmd_number=2, message=Message(CMD_MID, function_code=1))
    app.ats_tables[1][0] = first
    app.ats_tables[1][7] = second
    app.ats_cmd_index_buffer[1][1] = 7
    app.ats_ctrl.ats_number = 2
    app.ats_ctrl.cmd_number = 2
    assert app.current_ats_entry() is second
    app.ats_ctrl.cmd_number = 1
    assert app.current_ats_entry() is first


def test_current_ats_entry_none_when_invalid(app):
    app.ats_ctrl.ats_number = 0
    app.ats_ctrl.cmd_number = 1
    assert app.current_ats_entry() is None
    app.ats_ctrl.ats_number = 1
    app.ats_tables[0] = None
    assert app.current_ats_entry() is None


def test_current_rts_entry_uses_next_command_ptr(app):
    entry = RtsEntry(message=Message(CMD_MID), time_tag=3)
    app.rts_tables[0][5] = entry
    app.rts_info[0].next_command_ptr = 5
    app.rts_ctrl.rts_number = 1
    assert app.current_rts_entry() is entry


def test_current_rts_entry_out_of_range(app):
    app.rts_ctrl.rts_number = 0
    assert app.current_rts_entry() is None
    app.rts_ctrl.rts_number = NUMBER_OF_RTS + 1
    assert app.current_rts_entry() is None


def test_default_services():
    services = Services()
    msg = Message(CMD_MID, checksum_valid=False)
    assert services.transmit(msg, True) == SUCCESS
    assert services.validate_checksum(msg) is False
    assert services.validate_checksum(Message(CMD_MID)) is True
    assert services.inline_switch() is False
    assert services.kill_ats is None
    assert services.command_handlers == {}


def test_separate_apps_do_not_share_state():
    one = StoredCommandApp()
    two = StoredCommandApp()
    one.rts_info[0].cmd_ctr = 5
    one.hk.rts_executing_status[0] = 1
    assert two.rts_info[0].cmd_ctr == 0
    assert two.hk.rts_executing_status[0] == 0