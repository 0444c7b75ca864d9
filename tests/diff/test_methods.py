from apidiff.diff.methods import METHOD_LIMIT, OTHER_METHODS, method_set_diff
from apidiff.diff.sink import ListSink
from apidiff.model.types import Method

# ----------------------------
# Helpers
# ----------------------------


def _m(name: str, signature: str = "()", receiver: str = "pack.T") -> Method:
    return Method(name=name, signature=signature, exported=name[:1].isupper(), receiver=receiver)


def _run(before, after, label="T", **kwargs) -> tuple[int, list[str]]:
    sink = ListSink()
    n = method_set_diff(sink, before, after, label, package="pack", **kwargs)
    return n, sink.lines


# ----------------------------
# Tests
# ----------------------------


class TestMethodSetDiff:
    def test_no_changes_emit_nothing_not_even_the_header(self):
        ms = (_m("A"), _m("B", "() int"))
        assert _run(ms, ms) == (0, [])

    def test_added_method_is_printed_under_lazy_header(self):
        n, lines = _run((), (_m("What", "() int", receiver="pack.T3"),), label="T3")

        assert n == 1
        assert lines == ["T3", "\t+func (T3).What() int"]

    def test_signature_change_is_removal_plus_addition(self):
        n, lines = _run((_m("K", "(int)"),), (_m("K", "(int) string"),))

        assert n == 2
        assert lines == ["T", "\t+func (T).K(int) string", "\t-func (T).K(int)"]

    def test_receiver_change_counts_as_a_change(self):
        before = (_m("Name", receiver="pack.T"),)
        after = (_m("Name", receiver="*pack.T"),)

        _, lines = _run(before, after)

        assert "\t+func (*T).Name()" in lines
        assert "\t-func (T).Name()" in lines

    def test_unexported_methods_are_ignored(self):
        assert _run((_m("hidden"),), (_m("secret"),)) == (0, [])

    def test_cap_truncates_and_adds_single_sentinel(self):
        after = tuple(_m(f"M{i}") for i in range(METHOD_LIMIT + 3))

        n, lines = _run((), after)

        assert n == METHOD_LIMIT
        assert lines[0] == "T"
        assert len(lines) == 1 + METHOD_LIMIT + 1
        assert all(line.startswith("\t+") for line in lines[1:-1])
        assert lines[-1] == OTHER_METHODS
        assert lines.count(OTHER_METHODS) == 1

    def test_sentinel_is_printed_once_the_cap_is_reached(self):
        after = tuple(_m(f"M{i}") for i in range(METHOD_LIMIT))

        _, lines = _run((), after)

        assert lines[-1] == OTHER_METHODS

    def test_below_cap_has_no_sentinel(self):
        after = tuple(_m(f"M{i}") for i in range(METHOD_LIMIT - 1))

        n, lines = _run((), after)

        assert n == METHOD_LIMIT - 1
        assert OTHER_METHODS not in lines

    def test_additions_use_budget_before_removals(self):
        before = tuple(_m(f"Old{i}") for i in range(3))
        after = tuple(_m(f"New{i}") for i in range(4))

        _, lines = _run(before, after)

        body = lines[1:-1]
        assert [line[:2] for line in body] == ["\t+"] * 4 + ["\t-"]

    def test_custom_limit(self):
        after = tuple(_m(f"M{i}") for i in range(4))

        n, lines = _run((), after, limit=2)

        assert n == 2
        assert lines == ["T", "\t+func (T).M0()", "\t+func (T).M1()", OTHER_METHODS]

    def test_different_package_names_compare_equal(self):
        sink = ListSink()
        before = (_m("A", "(pack.T) pack.T"),)
        after = (Method(name="A", signature="(other.T) other.T", receiver="other.T"),)

        n = method_set_diff(sink, before, after, "T", package="pack", after_package="other")

        assert n == 0
        assert sink.lines == []

    def test_zero_limit_never_prints_a_bare_sentinel(self):
        ms = (_m("A"),)
        assert _run(ms, ms, limit=0) == (0, [])
        assert _run((), (_m("B"),), limit=0) == (0, [])
