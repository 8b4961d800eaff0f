"""AutoSaver tests — debouncing, cancellation and failure recording.

Delays are kept at a few milliseconds; each test sleeps comfortably past
the delay before asserting.
"""

import asyncio

import pytest

from awv_templates.autosave import AutoSaver, is_saveable
from awv_templates.editor import TemplateEditor
from awv_templates.models import Template

from helpers.builders import awv_template

DELAY = 0.01


class _Recorder:
    def __init__(self, fail=False, block=None):
        self.saved = []
        self.fail = fail
        self.block = block

    async def __call__(self, snapshot):
        if self.block is not None:
            await self.block.wait()
        if self.fail:
            raise RuntimeError("disk full")
        self.saved.append(snapshot)


class TestIsSaveable:
    def test_named_with_sections(self):
        assert is_saveable(awv_template())

    def test_blank_name(self):
        assert not is_saveable(awv_template().model_copy(update={"name": "  "}))

    def test_no_sections(self):
        assert not is_saveable(Template(name="Draft"))


class TestDebounce:
    @pytest.mark.asyncio
    async def test_only_last_snapshot_saved(self):
        recorder = _Recorder()
        saver = AutoSaver(recorder, delay=DELAY)
        for name in ("one", "two", "three"):
            saver.schedule(awv_template().model_copy(update={"name": name}))
        assert saver.pending
        await asyncio.sleep(DELAY * 5)
        assert [t.name for t in recorder.saved] == ["three"]
        assert saver.last_saved.name == "three"
        assert not saver.pending

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_save(self):
        recorder = _Recorder()
        saver = AutoSaver(recorder, delay=DELAY)
        saver.schedule(awv_template())
        saver.cancel()
        await asyncio.sleep(DELAY * 5)
        assert recorder.saved == []

    @pytest.mark.asyncio
    async def test_unsaveable_snapshot_skipped(self):
        recorder = _Recorder()
        saver = AutoSaver(recorder, delay=DELAY)
        saver.schedule(Template(name=""))
        await asyncio.sleep(DELAY * 5)
        assert recorder.saved == []
        assert saver.last_saved is None

    @pytest.mark.asyncio
    async def test_wired_to_editor(self):
        recorder = _Recorder()
        saver = AutoSaver(recorder, delay=DELAY)
        editor = TemplateEditor(on_change=saver.schedule)
        editor.update_details(name="Draft")
        editor.add_section()
        editor.update_section(0, title="Vitals")
        await asyncio.sleep(DELAY * 5)
        assert len(recorder.saved) == 1
        assert recorder.saved[0].sections[0].title == "Vitals"


class TestInFlight:
    @pytest.mark.asyncio
    async def test_later_edit_does_not_cancel_running_save(self):
        gate = asyncio.Event()
        recorder = _Recorder(block=gate)
        saver = AutoSaver(recorder, delay=DELAY)
        saver.schedule(awv_template().model_copy(update={"name": "first"}))
        await asyncio.sleep(DELAY * 5)

        # First save is now blocked inside the save function
        saver.schedule(awv_template().model_copy(update={"name": "second"}))
        saver.cancel()
        gate.set()
        await saver.flush()
        assert [t.name for t in recorder.saved] == ["first"]

    @pytest.mark.asyncio
    async def test_failure_recorded_not_raised(self):
        saver = AutoSaver(_Recorder(fail=True), delay=DELAY)
        saver.schedule(awv_template())
        await asyncio.sleep(DELAY * 5)
        await saver.flush()
        assert isinstance(saver.last_error, RuntimeError)
        assert saver.last_saved is None

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(self):
        recorder = _Recorder(fail=True)
        saver = AutoSaver(recorder, delay=DELAY)
        saver.schedule(awv_template())
        await asyncio.sleep(DELAY * 5)
        recorder.fail = False
        saver.schedule(awv_template())
        await asyncio.sleep(DELAY * 5)
        assert saver.last_error is None
        assert saver.last_saved is not None


class TestOutOfOrderCompletion:
    @pytest.mark.asyncio
    async def test_stale_save_finishing_last_does_not_win(self):
        gates = {"old": asyncio.Event(), "new": asyncio.Event()}
        finished = []

        async def save(snapshot):
            await gates[snapshot.name].wait()
            finished.append(snapshot.name)

        saver = AutoSaver(save, delay=DELAY)
        saver.schedule(awv_template().model_copy(update={"name": "old"}))
        await asyncio.sleep(DELAY * 5)
        saver.schedule(awv_template().model_copy(update={"name": "new"}))
        await asyncio.sleep(DELAY * 5)

        gates["new"].set()
        await asyncio.sleep(DELAY)
        gates["old"].set()
        await saver.flush()

        assert finished == ["new", "old"]
        assert saver.last_saved.name == "new", "Older save must not overwrite the status"

    @pytest.mark.asyncio
    async def test_stale_failure_does_not_mask_newer_success(self):
        gates = {"old": asyncio.Event(), "new": asyncio.Event()}

        async def save(snapshot):
            await gates[snapshot.name].wait()
            if snapshot.name == "old":
                raise RuntimeError("timeout")

        saver = AutoSaver(save, delay=DELAY)
        saver.schedule(awv_template().model_copy(update={"name": "old"}))
        await asyncio.sleep(DELAY * 5)
        saver.schedule(awv_template().model_copy(update={"name": "new"}))
        await asyncio.sleep(DELAY * 5)

        gates["new"].set()
        await asyncio.sleep(DELAY)
        gates["old"].set()
        await saver.flush()

        assert saver.last_error is None
        assert saver.last_saved.name == "new"
