"""Tests for ActionDispatcher - action slots, picking and key routing."""

from dbtree.config import KeyMapping
from dbtree.shell.actions import ActionDispatcher
from dbtree.shell.layout import LayoutNode
from dbtree.shell.tree_model import TreeModel


class Recorder:
    def __init__(self):
        self.refreshes = 0
        self.redraws = 0
        self.events = []

    def refresh(self):
        self.refreshes += 1

    def redraw(self):
        self.redraws += 1


def make_dispatcher(nodes, prompt=None):
    model = TreeModel()
    model.reconcile(nodes)
    recorder = Recorder()
    dispatcher = ActionDispatcher(
        model,
        refresh=recorder.refresh,
        redraw=recorder.redraw,
        prompt=prompt,
        event_logger=recorder.events.append,
    )
    return dispatcher, recorder


class TestInvoke:
    """Invoke(node, slot) semantics."""

    def test_two_argument_action_opens_prompt_first(self, fake_prompt):
        calls = []

        def handler(done, selection):
            calls.append(selection)
            done()

        node = LayoutNode(id="n", name="n", pick_title="Pick one", pick_items=["a", "b"], action_1=handler)
        dispatcher, recorder = make_dispatcher([node], fake_prompt)

        assert dispatcher.invoke("n", 1) is True

        assert fake_prompt.calls == [(["a", "b"], "Pick one")]
        assert calls == []

        fake_prompt.choose("b")

        assert calls == ["b"]
        assert recorder.refreshes == 1

    def test_one_argument_action_bypasses_prompt(self, fake_prompt):
        calls = []

        def handler(done):
            calls.append("ran")
            done()

        node = LayoutNode(id="n", name="n", pick_items=["a", "b"], action_2=handler)
        dispatcher, recorder = make_dispatcher([node], fake_prompt)

        dispatcher.invoke("n", 2)

        assert fake_prompt.calls == []
        assert calls == ["ran"]
        assert recorder.refreshes == 1

    def test_dismissed_prompt_does_not_invoke_action(self, fake_prompt):
        calls = []
        node = LayoutNode(id="n", name="n", pick_items=["a"], action_1=lambda done, sel: calls.append(sel))
        dispatcher, recorder = make_dispatcher([node], fake_prompt)

        dispatcher.invoke("n", 1)
        fake_prompt.dismiss()

        assert calls == []
        assert recorder.refreshes == 0

    def test_pick_items_provider_is_resolved(self, fake_prompt):
        node = LayoutNode(id="n", name="n", pick_items=lambda: ["x", "y"], action_1=lambda done, sel: done())
        dispatcher, _ = make_dispatcher([node], fake_prompt)

        dispatcher.invoke("n", 1)

        assert fake_prompt.calls == [(["x", "y"], None)]

    def test_missing_pick_items_invokes_without_selection(self, fake_prompt):
        calls = []
        node = LayoutNode(id="n", name="n", action_1=lambda done, sel: calls.append(sel))
        dispatcher, _ = make_dispatcher([node], fake_prompt)

        dispatcher.invoke("n", 1)

        assert fake_prompt.calls == []
        assert calls == [None]

    def test_unset_slot_is_noop(self):
        dispatcher, recorder = make_dispatcher([LayoutNode(id="n", name="n")])

        assert dispatcher.invoke("n", 3) is False
        assert dispatcher.invoke("missing", 1) is False
        assert dispatcher.invoke(None, 1) is False
        assert recorder.refreshes == 0

    def test_continuation_may_fire_later(self):
        pending = []
        node = LayoutNode(id="n", name="n", action_1=lambda done: pending.append(done))
        dispatcher, recorder = make_dispatcher([node])

        dispatcher.invoke("n", 1)
        assert recorder.refreshes == 0

        pending.pop()()
        assert recorder.refreshes == 1

    def test_dispatched_actions_are_logged(self, fake_prompt):
        node = LayoutNode(id="n", name="n", pick_items=["a"], action_1=lambda done, sel: None, action_2=lambda done: None)
        dispatcher, recorder = make_dispatcher([node], fake_prompt)

        dispatcher.invoke("n", 2)
        dispatcher.invoke("n", 1)
        fake_prompt.choose("a")

        assert recorder.events == ["action_2 on 'n'", "action_1 on 'n' with 'a'"]


class TestTreeOperations:
    """Expand/collapse/toggle redraw only on change."""

    def nodes(self):
        return [LayoutNode(id="p", name="p", children=[LayoutNode(id="c1", name="c1"), LayoutNode(id="c2", name="c2")])]

    def test_collapse_collapsed_node_skips_redraw(self):
        dispatcher, recorder = make_dispatcher(self.nodes())

        assert dispatcher.collapse("p") is False
        assert recorder.redraws == 0

    def test_expand_redraws(self):
        dispatcher, recorder = make_dispatcher(self.nodes())

        assert dispatcher.expand("p") is True
        assert recorder.redraws == 1
        assert dispatcher.expand("p") is False
        assert recorder.redraws == 1

    def test_toggle(self):
        dispatcher, recorder = make_dispatcher(self.nodes())

        dispatcher.toggle("p")
        assert dispatcher.model.get("p").expanded is True
        dispatcher.toggle("p")
        assert dispatcher.model.get("p").expanded is False
        assert recorder.redraws == 2

    def test_operations_without_node(self):
        dispatcher, recorder = make_dispatcher(self.nodes())

        assert dispatcher.expand(None) is False
        assert dispatcher.collapse(None) is False
        assert dispatcher.toggle(None) is False

    def test_refresh_ignores_node(self):
        dispatcher, recorder = make_dispatcher(self.nodes())

        dispatcher.refresh("p")
        dispatcher.refresh()

        assert recorder.refreshes == 2


class TestKeyRouting:
    def test_keymap_wires_known_actions_only(self):
        dispatcher, _ = make_dispatcher([])
        keymap = dispatcher.keymap({
            "refresh": KeyMapping(key="r"),
            "toggle": KeyMapping(key="o"),
            "action_1": KeyMapping(key="enter"),
            "dance": KeyMapping(key="x"),
        })

        assert keymap == {"r": "refresh", "o": "toggle", "enter": "action_1"}

    def test_dispatch_by_name(self):
        calls = []
        dispatcher, recorder = make_dispatcher([
            LayoutNode(id="n", name="n", action_3=lambda done: calls.append("three")),
        ])

        dispatcher.dispatch("action_3", "n")
        dispatcher.dispatch("refresh", None)

        assert calls == ["three"]
        assert recorder.refreshes == 1
        assert dispatcher.dispatch("unknown", "n") is None
