# storedcmd

A stored command processor. It holds absolute time sequences (ATS) and
relative time sequences (RTS) of commands, runs each command when it falls
due, and keeps housekeeping counters and status for ground monitoring.

## Installation

```
pip install .
```

Nothing outside the standard library is needed at run time. To run the tests:

```
pip install ".[test]"
pytest
```

## Usage

All state lives in one `StoredCommandApp` (from `storedcmd.model`). The bus,
table services, clock and the rest of the application are reached through
its `Services` object, whose callables you can replace.

```python
from storedcmd.model import CMD_MID, NOOP_CC, Message, StoredCommandApp
from storedcmd.dispatch import process_request

app = StoredCommandApp()
process_request(app, Message(CMD_MID, NOOP_CC))

print(app.hk.cmd_ctr)    # 1
print(app.event_ids())   # [<EventId.NOOP_INF: 2>]
```

Every event goes through `StoredCommandApp.send_event`, which records an
`Event` in `app.events`; `event_ids()` lists their ids in order.

## What is in the package

- `storedcmd.model`: the state (`StoredCommandApp`, `HousekeepingPayload`,
  `AtsControlBlock`, `RtsControlBlock`, `AtsInfo`, `RtsInfo`, `AtsEntry`,
  `RtsEntry`), `Message`, `Event`, `Services`, the enums `TableType`,
  `Processor`, `CmdStatus`, `EventType`, `EventId`, and the message ids,
  function codes, table ids and sizing constants.
  `current_ats_entry()` and `current_rts_entry()` return the entry the
  control blocks point at, or `None`.
- `storedcmd.executor`:
  - `process_atp_cmd(app)` runs one due command from the executing ATS. It
    checks the command's status, its command number and its checksum (unless
    `enable_header_update` is set). A switch-ATS command stored in an ATS is
    carried out through `Services.inline_switch`; any other command is sent
    through `Services.transmit`. Failures update the error counters and
    events, and abort the ATS where required (`continue_ats_on_failure_flag`
    keeps it running after a checksum failure).
  - `process_rtp_command(app)` does the same for the active RTS and stops it
    on a send or checksum failure.
- `storedcmd.housekeeping`:
  - `send_hk_packet(app)` fills in free ATS bytes, control block state, next
    command times and the executing/disabled RTS bit masks. It sends the packet
    and also appends it to `app.outbox`, then returns it.
  - `noop_cmd` counts the command and reports the version.
  - `reset_counters_cmd` clears the command and error counters.
- `storedcmd.tables`: `table_manage_cmd` picks the table from the request's
  `parameter` payload field. `manage_ats_table` and `manage_rts_table` check
  the index. `manage_table` releases the table, lets the services manage it
  and acquires it again. On an update it calls the matching load hook;
  otherwise it reports the error.
- `storedcmd.dispatch`:
  - `process_request(app, message)` routes by message id: ground commands, the
    housekeeping request (which also starts the auto-start RTS once) and the
    wakeup. The wakeup runs due commands until none is due or
    `MAX_CMDS_PER_SEC` is reached.
  - `process_command(app, message)` checks the command length and routes by
    function code.

Without a `transmit` callable, sent messages are collected in
`Services.sent`. Without a `verify_length` callable, a command is accepted
when its payload holds every field listed for its layout in
`Services.required_payload`.

## What it does not do

- It does not start, stop, enable, disable, switch, jump or append to
  sequences itself. `process_command` checks those commands and passes them
  to whatever is registered for their function code in
  `Services.command_handlers`.
- It does not load table contents, compute next command times, advance to
  the next command or stop a sequence. Those are the `Services` hooks
  (`load_ats`, `load_rts`, `update_append`, `update_next_time`,
  `get_next_ats_command`, `get_next_rts_command`, `kill_ats`, `kill_rts`,
  `service_switch_pend`, `auto_start_rts`). A hook left as `None` is skipped.
- It has no real message bus, no table storage and no command-line program.