from scoopsearch.core.errors import ExternalCommandFailed
from scoopsearch.infra.scoop_cli import CommandResult

OFFICIAL_REGISTRY = {
    "main": "https://github.com/ScoopInstaller/Main",
    "extras": "https://github.com/ScoopInstaller/Extras",
}


def export_document(buckets=(), apps=()) -> dict:
    return {
        "buckets": [{"Name": name, "Source": source} for name, source in buckets],
        "apps": [
            {"Name": name, "Version": "1.0", "Source": source} for name, source in apps
        ],
    }


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeScoopCli:
    """Records `scoop` invocations and mimics bucket/app registration."""

    def __init__(self, buckets=(), apps=()) -> None:
        self.buckets = list(buckets)
        self.apps = list(apps)
        self.calls: list[str] = []
        self.fail: dict[str, ExternalCommandFailed] = {}

    def _record(self, args: str) -> CommandResult:
        self.calls.append(args)
        verb = args.split(" ")[0] if not args.startswith("bucket ") else "bucket add"
        if verb in self.fail:
            raise self.fail[verb]
        return CommandResult(stdout="", stderr="", returncode=0)

    @property
    def export_calls(self) -> int:
        return self.calls.count("export")

    def export(self, timeout_sec: int = 60) -> CommandResult:
        self._record("export")
        data = export_document(self.buckets, self.apps)
        return CommandResult(stdout="", stderr="", returncode=0, json=data)

    def update(self, timeout_sec: int = 300) -> CommandResult:
        return self._record("update")

    def bucket_add(
        self, name: str, repository: str | None = None, timeout_sec: int = 900
    ) -> CommandResult:
        args = f"bucket add {name} {repository}" if repository else f"bucket add {name}"
        result = self._record(args)
        self.buckets.append((name, repository or OFFICIAL_REGISTRY.get(name, "")))
        return result

    def install(self, target: str, timeout_sec: int = 900) -> CommandResult:
        result = self._record(f"install {target}")
        bucket, _, package = target.partition("/")
        self.apps.append((package, bucket))
        return result
