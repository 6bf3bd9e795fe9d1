"""Tests for the Future core: construction, fork, map/chain and their laws."""

import logging
import time

import pytest

from forkable import Err, Future, NotAFutureError, Ok, SettlementTimeout


def outcome_of(future):
    rejections, resolutions = [], []
    future.fork(on_rejected=rejections.append, on_resolved=resolutions.append)
    return rejections, resolutions


SAMPLES = [
    Future.of(3),
    Future.rejected("nope"),
    Future(lambda reject, resolve: resolve(10)),
    Future(lambda reject, resolve: reject(ValueError)),
]


class TestConstruction:
    def test_of_resolves_once(self, recorder):
        recorder.fork(Future.of(7))
        assert recorder.outcome == ([], [7])

    def test_rejected_rejects_once(self, recorder):
        recorder.fork(Future.rejected("E"))
        assert recorder.outcome == (["E"], [])

    def test_construct_and_map(self, recorder):
        recorder.fork(Future(lambda reject, resolve: resolve(42)).map(lambda x: x * 2))
        assert recorder.outcome == ([], [84])

    def test_requires_named_continuations(self):
        with pytest.raises(TypeError, match="reject"):
            Future(lambda ok, fail: None)
        with pytest.raises(TypeError, match="reject"):
            Future(lambda: None)

    def test_refuses_extra_required_arguments(self):
        with pytest.raises(TypeError, match="unsupported"):
            Future(lambda reject, resolve, extra: None)

    def test_reject_only_computation(self, recorder):
        called = []

        def bind(x):
            called.append(x)
            return Future.of(x)

        recorder.fork(Future(lambda reject: reject("boom")).chain(bind))
        assert recorder.outcome == (["boom"], [])
        assert called == []

    def test_resolve_only_computation(self, recorder):
        recorder.fork(Future(lambda resolve: resolve(1)).map(lambda x: x + 1))
        assert recorder.outcome == ([], [2])

    def test_var_keyword_computation_gets_both(self, recorder):
        recorder.fork(Future(lambda **continuations: continuations["resolve"](sorted(continuations))))
        assert recorder.outcome == ([], [["reject", "resolve"]])

    def test_keyword_continuations_cannot_be_flipped(self, recorder):
        # Parameter order does not matter, names do.
        recorder.fork(Future(lambda resolve, reject: resolve("right")))
        assert recorder.outcome == ([], ["right"])

    def test_requires_callable(self):
        with pytest.raises(TypeError, match="callable"):
            Future(42)

    def test_attempt(self, recorder):
        recorder.fork(Future.attempt(int, "12"))
        recorder.fork(Future.attempt(int, "twelve"))
        assert recorder.resolutions == [12]
        assert isinstance(recorder.rejections[0], ValueError)

    def test_from_result(self):
        assert outcome_of(Future.from_result(Ok(1))) == ([], [1])
        assert outcome_of(Future.from_result(Err("bad"))) == (["bad"], [])

    def test_from_result_rejects_other_values(self):
        with pytest.raises(TypeError):
            Future.from_result(("ok", 1))

    def test_repr(self):
        assert repr(Future.of(1)).startswith("Future(")


class TestLaziness:
    def test_nothing_runs_before_fork(self):
        effects = []

        def run(reject, resolve):
            effects.append("run")
            resolve(1)

        def transform(x):
            effects.append("map")
            return x

        def bind(x):
            effects.append("chain")
            return Future.of(x)

        composed = Future(run).map(transform).chain(bind).map_rejected(transform)
        assert effects == []

        composed.fork(on_rejected=lambda e: None, on_resolved=lambda v: None)
        assert effects == ["run", "map", "chain"]

    def test_each_fork_reruns_the_computation(self):
        runs = []
        future = Future(lambda reject, resolve: resolve(runs.append(1) or len(runs)))
        assert outcome_of(future) == ([], [1])
        assert outcome_of(future) == ([], [2])


class TestSettlementGuard:
    def test_second_call_is_ignored(self, recorder, caplog):
        def run(reject, resolve):
            resolve(1)
            resolve(2)
            reject("late")

        with caplog.at_level(logging.WARNING, logger="forkable.future"):
            recorder.fork(Future(run))

        assert recorder.outcome == ([], [1])
        ignored = [r for r in caplog.records if "already settled" in r.getMessage()]
        assert [(r.settlement, r.outcome) for r in ignored] == [
            ("ignored", "resolution"),
            ("ignored", "rejection"),
        ]

    def test_raise_before_settling_rejects(self, recorder):
        def run(reject, resolve):
            raise KeyError("missing")

        recorder.fork(Future(run))
        assert isinstance(recorder.rejections[0], KeyError)
        assert recorder.resolutions == []

    def test_raise_after_settling_propagates(self, recorder):
        def run(reject, resolve):
            resolve(1)
            raise RuntimeError("after the fact")

        with pytest.raises(RuntimeError, match="after the fact"):
            recorder.fork(Future(run))
        assert recorder.outcome == ([], [1])

    def test_callback_errors_are_not_turned_into_rejections(self):
        rejections = []

        def explode(value):
            raise RuntimeError("consumer bug")

        with pytest.raises(RuntimeError, match="consumer bug"):
            Future.of(1).map(str).fork(on_rejected=rejections.append, on_resolved=explode)
        assert rejections == []


class TestMap:
    @pytest.mark.parametrize("future", SAMPLES)
    def test_identity_law(self, future):
        assert outcome_of(future.map(lambda x: x)) == outcome_of(future)

    @pytest.mark.parametrize("future", SAMPLES)
    def test_composition_law(self, future):
        f = lambda x: x + 1
        g = lambda x: x * 10
        assert outcome_of(future.map(f).map(g)) == outcome_of(future.map(lambda x: g(f(x))))

    def test_map_skips_rejections(self):
        calls = []
        assert outcome_of(Future.rejected("E").map(calls.append)) == (["E"], [])
        assert calls == []

    def test_raising_transform_becomes_rejection(self, recorder):
        recorder.fork(Future.of(0).map(lambda x: 1 / x))
        assert isinstance(recorder.rejections[0], ZeroDivisionError)
        assert recorder.resolutions == []


class TestChain:
    def test_flattens_one_level(self):
        assert outcome_of(Future.of(2).chain(lambda x: Future.of(x + 1))) == ([], [3])

    def test_rejection_skips_chained_function(self, recorder):
        called = []

        def bind(x):
            called.append(x)
            return Future.of(x)

        recorder.fork(Future(lambda reject, resolve: reject("boom")).chain(bind))
        assert recorder.outcome == (["boom"], [])
        assert called == []

    def test_inner_rejection_propagates(self):
        assert outcome_of(Future.of(1).chain(lambda x: Future.rejected(x))) == ([1], [])

    @pytest.mark.parametrize("future", SAMPLES)
    def test_associativity_law(self, future):
        f = lambda a: Future.of(a * 2)
        g = lambda b: Future.rejected(b) if b == 20 else Future.of(b - 1)
        assert outcome_of(future.chain(f).chain(g)) == outcome_of(future.chain(lambda a: f(a).chain(g)))

    def test_left_identity(self):
        f = lambda a: Future.of([a])
        assert outcome_of(Future.of(5).chain(f)) == outcome_of(f(5))

    def test_non_future_result_rejects(self, recorder):
        recorder.fork(Future.of(1).chain(lambda x: x))
        assert isinstance(recorder.rejections[0], NotAFutureError)
        assert isinstance(recorder.rejections[0], TypeError)

    def test_raising_function_becomes_rejection(self, recorder):
        recorder.fork(Future.of({}).chain(lambda d: Future.of(d["key"])))
        assert isinstance(recorder.rejections[0], KeyError)

    def test_chain_waits_for_asynchronous_source(self):
        order = []
        future = Future.after(0.05, "outer").chain(
            lambda v: Future.attempt(lambda: order.append(v) or v + "+inner")
        )
        assert future.await_result(timeout=5) == Ok("outer+inner")
        assert order == ["outer"]


class TestRecovery:
    def test_map_rejected(self):
        assert outcome_of(Future.rejected(2).map_rejected(lambda e: e * 3)) == ([6], [])
        assert outcome_of(Future.of(2).map_rejected(lambda e: e * 3)) == ([], [2])

    def test_bimap(self):
        assert outcome_of(Future.rejected("e").bimap(str.upper, len)) == (["E"], [])
        assert outcome_of(Future.of("abc").bimap(str.upper, len)) == ([], [3])

    def test_chain_rejected_recovers(self):
        recovered = Future.rejected("offline").chain_rejected(lambda e: Future.of(f"cached ({e})"))
        assert outcome_of(recovered) == ([], ["cached (offline)"])

    def test_fold_absorbs_rejection(self):
        fold = lambda f: f.fold(lambda e: ("err", e), lambda v: ("ok", v))
        assert outcome_of(fold(Future.rejected(1))) == ([], [("err", 1)])
        assert outcome_of(fold(Future.of(2))) == ([], [("ok", 2)])

    def test_swap(self):
        assert outcome_of(Future.of(1).swap()) == ([1], [])
        assert outcome_of(Future.rejected(1).swap()) == ([], [1])


class TestCancellation:
    def test_cancel_handle_passes_through(self):
        calls = []
        future = Future(lambda reject, resolve: lambda: calls.append("cancelled")).map(str)
        cancel = future.fork(on_rejected=calls.append, on_resolved=calls.append)
        cancel()
        assert calls == ["cancelled"]

    def test_cancelled_timer_never_settles(self, recorder):
        cancel = recorder.fork(Future.after(0.1, "late"))
        cancel()
        time.sleep(0.2)
        assert recorder.outcome == ([], [])

    def test_cancel_follows_chain_to_inner_future(self, recorder):
        cancel = recorder.fork(Future.of(1).chain(lambda x: Future.after(0.1, x)))
        cancel()
        time.sleep(0.2)
        assert recorder.outcome == ([], [])

    def test_late_outcome_after_cancel_is_discarded(self, recorder):
        continuations = {}

        def run(reject, resolve):
            continuations["resolve"] = resolve

        cancel = recorder.fork(Future(run))
        cancel()
        continuations["resolve"]("too late")
        assert recorder.outcome == ([], [])


class TestAwaitResult:
    def test_resolved(self):
        assert Future.after(0.01, "x").await_result(timeout=5) == Ok("x")

    def test_rejected(self):
        assert Future.rejected_after(0.01, "e").await_result(timeout=5) == Err("e")

    def test_timeout(self):
        with pytest.raises(SettlementTimeout):
            Future(lambda reject, resolve: None).await_result(timeout=0.05)
