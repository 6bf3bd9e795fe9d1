import pytest


class Recorder:
    """Collects what a fork reports to each continuation."""

    def __init__(self):
        self.rejections = []
        self.resolutions = []

    def on_rejected(self, error):
        self.rejections.append(error)

    def on_resolved(self, value):
        self.resolutions.append(value)

    def fork(self, future):
        return future.fork(on_rejected=self.on_rejected, on_resolved=self.on_resolved)

    @property
    def outcome(self):
        return (list(self.rejections), list(self.resolutions))


@pytest.fixture
def recorder():
    return Recorder()
