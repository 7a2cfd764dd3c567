import unittest

from svdoc.model import (
    File,
    Module,
    Note,
    Parameter,
    Port,
    Signal,
    StateDoc,
    StateMachineStart,
    Summary,
    Transition,
    group_state_machines,
    joined_summary,
    packed_width,
)


class TestAnnotationItems(unittest.TestCase):
    def test_append_extends_text(self):
        note = Note("first")
        note.append("\nsecond")
        self.assertEqual(note.text, "first\nsecond")

    def test_variants_compare_by_type(self):
        self.assertNotEqual(Summary("x"), Note("x"))

    def test_joined_summary(self):
        items = [Summary("a"), Note("n"), Summary("b")]
        self.assertEqual(joined_summary(items), "a\nb")
        self.assertEqual(joined_summary([Note("n")]), "")


class TestPackedWidth(unittest.TestCase):
    def test_simple_range(self):
        self.assertEqual(packed_width("logic [7:0]"), 8)

    def test_ascending_range(self):
        self.assertEqual(packed_width("bit [0:3]"), 4)

    def test_scalar(self):
        self.assertIsNone(packed_width("logic"))
        self.assertIsNone(packed_width(None))

    def test_parameterised_range(self):
        self.assertIsNone(packed_width("logic [WIDTH-1:0]"))

    def test_multiple_ranges(self):
        self.assertIsNone(packed_width("logic [3:0][7:0]"))


class TestRecords(unittest.TestCase):
    def test_port_str(self):
        self.assertEqual(str(Port("data", "logic [7:0]", "input")), "input logic [7:0] data")

    def test_parameter_str(self):
        self.assertEqual(str(Parameter("WIDTH", "int", "8")), "parameter int WIDTH = 8")

    def test_lookup_helpers(self):
        mod = Module(
            "top",
            ports=[Port("clk")],
            parameters=[Parameter("W")],
            signals=[Signal("state")],
        )
        self.assertIs(mod.get_port("clk"), mod.ports[0])
        self.assertIs(mod.get_parameter("W"), mod.parameters[0])
        self.assertIs(mod.get_signal("state"), mod.signals[0])
        self.assertIsNone(mod.get_port("CLK"))

    def test_file_get_module(self):
        f = File("a.sv", modules=[Module("a"), Module("b")])
        self.assertEqual(f.get_module("b").name, "b")
        self.assertIsNone(f.get_module("c"))


class TestStateMachines(unittest.TestCase):
    def test_grouping(self):
        items = [
            StateMachineStart("ctrl\nMain control FSM"),
            StateDoc("IDLE", "waiting"),
            Transition("IDLE", "RUN", "start asserted"),
            Transition("RUN", "IDLE", "done"),
        ]
        machines = group_state_machines(items)
        self.assertEqual(len(machines), 1)
        fsm = machines[0]
        self.assertEqual(fsm.name, "ctrl")
        self.assertEqual(fsm.summary, "Main control FSM")
        self.assertEqual([s.name for s in fsm.states], ["IDLE", "RUN"])
        self.assertEqual(fsm.get_state("IDLE").transitions, {"RUN": "start asserted"})
        self.assertEqual(fsm.get_state("RUN").transitions, {"IDLE": "done"})
        self.assertEqual(fsm.get_state("IDLE").items, [StateDoc("IDLE", "waiting")])

    def test_items_before_fsm_are_ignored(self):
        machines = group_state_machines([StateDoc("A", "x"), StateMachineStart("m")])
        self.assertEqual(len(machines), 1)
        self.assertEqual(machines[0].states, [])

    def test_several_machines(self):
        items = [
            StateMachineStart("a"),
            Transition("S0", "S1", ""),
            StateMachineStart("b"),
            StateDoc("T0", ""),
        ]
        machines = group_state_machines(items)
        self.assertEqual([m.name for m in machines], ["a", "b"])
        self.assertEqual([s.name for s in machines[1].states], ["T0"])

    def test_module_collects_signal_machines(self):
        sig = Signal("state_q", items=[StateMachineStart("sig_fsm")])
        mod = Module("top", signals=[sig], items=[StateMachineStart("mod_fsm")])
        self.assertEqual([m.name for m in mod.state_machines], ["mod_fsm", "sig_fsm"])


if __name__ == '__main__':
    unittest.main()
