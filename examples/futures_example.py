"""
Forkable Futures Example - lazy, composable deferred computations

Walks through building Futures, composing them with map/chain, running
independent work in parallel with lift/traverse, and wiring the filesystem
and HTTP collaborators.

Run from the repository root after `pip install -e .`:
    python examples/futures_example.py [DIRECTORY]
"""

import sys

from forkable import Err, Future, Ok, console, default_executor, fs, lift, setup_logging, traverse


def show(label):
    return dict(
        on_rejected=lambda err: print(f"{label}: rejected with {err!r}"),
        on_resolved=lambda val: print(f"{label}: resolved with {val!r}"),
    )


def basic_examples():
    print("=" * 60)
    print("Building and forking")
    print("=" * 60)

    answer = Future(lambda reject, resolve: resolve(42)).map(lambda x: x * 2)
    print("Nothing has run yet:", answer)
    answer.fork(**show("answer"))  # 84

    boom = Future(lambda reject, resolve: reject("boom")).chain(lambda x: Future.of(x))
    boom.fork(**show("boom"))  # rejected, chain function never called

    # Raised transforms become rejections
    Future.of(0).map(lambda x: 1 / x).fork(**show("divide"))


def natural_transformation_examples():
    print("\n" + "=" * 60)
    print("Result -> Future")
    print("=" * 60)

    Future.from_result(Ok("cached")).fork(**show("Ok"))
    Future.from_result(Err("stale")).fork(**show("Err"))

    # ...and back again by blocking until settled
    print("await_result:", Future.after(0.1, "later").await_result(timeout=1))


def parallel_examples():
    print("\n" + "=" * 60)
    print("Parallel composition")
    print("=" * 60)

    total = lift(lambda a, b, c: a + b + c, [
        Future.after(0.3, 1),
        Future.after(0.1, 2),
        Future.after(0.2, 3),
    ])
    print("lift:", total.await_result(timeout=2))  # Ok(6)

    ordered = traverse(Future.of, lambda n: Future.after(0.05 * (4 - n), n * n), [1, 2, 3])
    print("traverse keeps input order:", ordered.await_result(timeout=2))  # Ok([1, 4, 9])

    first_error = lift(lambda a, b: a + b, [Future.rejected("E1"), Future.of(2)])
    print("first rejection wins:", first_error.await_result())  # Err('E1')


def collaborator_examples(directory):
    print("\n" + "=" * 60)
    print(f"Filesystem collaborator on {directory}")
    print("=" * 60)

    with default_executor() as executor:
        sizes = (
            fs.read_dir(directory, executor=executor)
            .map(lambda names: [n for n in names if n.endswith(".py")])
            .chain(lambda names: traverse(
                Future.of,
                lambda n: fs.read_file(f"{directory}/{n}", executor=executor).map(
                    lambda text, n=n: (n, len(text.splitlines()))
                ),
                names,
            ))
        )
        on_rejected, on_resolved = console.log_outcome("line counts")
        sizes.await_result(timeout=10).match(on_resolved, on_rejected)


def main():
    setup_logging("INFO", "text")
    basic_examples()
    natural_transformation_examples()
    parallel_examples()
    collaborator_examples(sys.argv[1] if len(sys.argv) > 1 else "examples")


if __name__ == "__main__":
    main()
