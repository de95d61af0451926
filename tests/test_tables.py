import pytest

from storedcmd.model import (
    CMD_MID,
    MANAGE_TABLE_CC,
    NUMBER_OF_ATS,
    NUMBER_OF_RTS,
    SUCCESS,
    TBL_ERR_NEVER_LOADED,
    TBL_ID_APPEND,
    TBL_ID_ATP_CTRL,
    TBL_ID_ATS_0,
    TBL_ID_ATS_CMD_0,
    TBL_ID_ATS_INFO,
    TBL_ID_RTP_CTRL,
    TBL_ID_RTS_0,
    TBL_ID_RTS_INFO,
    TBL_INFO_UPDATED,
    EventId,
    Message,
    Services,
    StoredCommandApp,
    TableType,
)
from storedcmd.tables import manage_ats_table, manage_rts_table, manage_table, table_manage_cmd


class Recorder:
    def __init__(self, result=SUCCESS, table=None):
        self.result = result
        self.table = {} if table is None else table
        self.calls = []

    def app(self):
        return StoredCommandApp(
            services=Services(
                table_release=lambda h: self.calls.append(("release", h)),
                table_manage=lambda h: self.calls.append(("manage", h)),
                table_get_address=self._get_address,
                load_ats=lambda i: self.calls.append(("load_ats", i)),
                load_rts=lambda i: self.calls.append(("load_rts", i)),
                update_append=lambda: self.calls.append(("update_append",)),
            )
        )

    def names(self):
        return [call[0] for call in self.calls]

    def _get_address(self, handle):
        self.calls.append(("get", handle))
        return self.result, self.table


def _request(parameter):
    return Message(CMD_MID, MANAGE_TABLE_CC, payload={"parameter": parameter})


def _ats_table(app):
    return app.ats_tables[0]


def _rts_table(app):
    return app.rts_tables[0]


def _append_table(app):
    return app.append_table


LOADABLE = [
    (TBL_ID_ATS_0, ("load_ats", 0), _ats_table),
    (TBL_ID_RTS_0, ("load_rts", 0), _rts_table),
    (TBL_ID_APPEND, ("update_append",), _append_table),
]


@pytest.mark.parametrize("table_id, load_call, table_of", LOADABLE)
def test_updated_table_is_loaded(table_id, load_call, table_of):
    recorder = Recorder(TBL_INFO_UPDATED, {0: "new"})
    app = recorder.app()
    table_manage_cmd(app, _request(table_id))
    assert recorder.names() == ["release", "manage", "get", load_call[0]]
    assert recorder.calls[-1] == load_call
    assert table_of(app) == {0: "new"}
    assert app.events == []


@pytest.mark.parametrize("result", [SUCCESS, TBL_ERR_NEVER_LOADED])
@pytest.mark.parametrize("table_id, load_call, table_of", LOADABLE)
def test_quiet_results(result, table_id, load_call, table_of):
    recorder = Recorder(result)
    app = recorder.app()
    table_manage_cmd(app, _request(table_id))
    assert app.events == []
    assert recorder.names() == ["release", "manage", "get"]


@pytest.mark.parametrize(
    "manage, index, event_id",
    [
        (manage_ats_table, NUMBER_OF_ATS, EventId.TABLE_MANAGE_ATS_INV_INDEX_ERR),
        (manage_rts_table, NUMBER_OF_RTS, EventId.TABLE_MANAGE_RTS_INV_INDEX_ERR),
    ],
)
def test_invalid_index(manage, index, event_id):
    app = StoredCommandApp()
    manage(app, index)
    assert app.event_ids() == [event_id]


def test_last_rts_table_id_uses_last_index():
    recorder = Recorder(TBL_INFO_UPDATED)
    table_manage_cmd(recorder.app(), _request(TBL_ID_RTS_0 + NUMBER_OF_RTS - 1))
    assert recorder.calls[-1] == ("load_rts", NUMBER_OF_RTS - 1)


@pytest.mark.parametrize(
    "table_id",
    [TBL_ID_RTS_INFO, TBL_ID_RTP_CTRL, TBL_ID_ATS_INFO, TBL_ID_ATP_CTRL, TBL_ID_ATS_CMD_0],
)
def test_dump_only_tables_are_managed_only(table_id):
    recorder = Recorder()
    app = recorder.app()
    table_manage_cmd(app, _request(table_id))
    assert recorder.names() == ["manage"]
    assert app.events == []


@pytest.mark.parametrize("table_id", [999, 0])
def test_invalid_table_id(table_id):
    recorder = Recorder()
    app = recorder.app()
    table_manage_cmd(app, _request(table_id))
    assert app.event_ids() == [EventId.TABLE_MANAGE_ID_ERR]
    assert recorder.calls == []


def test_manage_table_without_services_keeps_table():
    app = StoredCommandApp()
    app.rts_tables[3] = {0: "kept"}
    manage_table(app, TableType.RTS, 3)
    assert app.rts_tables[3] == {0: "kept"}
    assert app.events == []