"""Tests for the command sinks."""

import logging

from qemistry.queues import QueueRegistry
from qemistry.sinks import CallbackCommandSink, LoggingCommandSink, StateCommandSink
from qemistry.state import DictStateResolver


class TestLoggingCommandSink:
    def test_logs_command(self, caplog):
        with caplog.at_level(logging.INFO, logger="qemistry.sinks"):
            LoggingCommandSink().send("kick target")
        assert "send: kick target" in caplog.text


class TestCallbackCommandSink:
    def test_forwards_command(self):
        received = []
        CallbackCommandSink(received.append).send("stand")
        assert received == ["stand"]


class TestStateCommandSink:
    """Tests for applying set commands to a state tree."""

    def test_set_flag(self, sink):
        state = DictStateResolver({"sys": {"balance": True}})
        StateCommandSink(state, sink).send("set sys.balance false")
        assert state.get("sys.balance") is False
        assert sink.commands == []

    def test_values_parsed_as_yaml_scalars(self, sink):
        state = DictStateResolver()
        target = StateCommandSink(state, sink)
        target.send("set sys.hp 12")
        target.send("set target.name big rat")
        target.send("set sys.ready true")
        assert state.get("sys.hp") == 12
        assert state.get("target.name") == "big rat"
        assert state.get_bool("sys.ready") is True

    def test_other_commands_forwarded(self, sink):
        state = DictStateResolver({"sys": {"balance": True}})
        target = StateCommandSink(state, sink)
        target.send("kick target")
        target.send("set")
        target.send("settle down now")
        assert sink.commands == ["kick target", "set", "settle down now"]
        assert state.get_bool("sys.balance") is True

    def test_default_fallback_logs(self, caplog):
        target = StateCommandSink(DictStateResolver())
        with caplog.at_level(logging.INFO, logger="qemistry.sinks"):
            target.send("stand")
        assert "send: stand" in caplog.text

    def test_clears_consumed_flag_in_queue(self, scheduler, sink):
        state = DictStateResolver({"sys": {"balance": True}})
        registry = QueueRegistry(state, StateCommandSink(state, sink), scheduler=scheduler)
        queue = registry.create("balance", "sys.balance")
        queue.add({"code": ["kick target", "set sys.balance false"], "consumed": "sys.balance"})
        registry.do()
        scheduler.run_until_idle()
        assert sink.commands == ["kick target"]
        assert queue.action_count == 0
        assert registry.pending_checks == 0
