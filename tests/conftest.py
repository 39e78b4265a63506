import pytest
from derrick.exceptions import CommandError


class RecordingRunner:
    """
    Stands in for CommandRunner: records executed commands and answers
    docker inspect queries from a set of container states, which successful
    docker commands update.
    """
    def __init__(self, running=(), existing=(), paused=(), images=(), failing=()):
        self.running = set(running)
        self.paused = set(paused)
        self.existing = set(existing) | self.running | self.paused
        self.images = set(images)
        self.failing = set(failing)
        self.commands = []

    @property
    def names(self):
        return [command[0] for command in self.commands]

    @property
    def docker_commands(self):
        return [command[1:] for command in self.commands if command[0] == "docker"]

    def execute(self, name, args=None):
        command = [name] + list(args or [])
        self.commands.append(command)
        if name in self.failing or (name == "docker" and self.failing & set(command[1:])):
            raise CommandError(command, f"{name} failed", returncode=1)
        if name == "docker":
            self._track(command[1:])

    def output(self, name, args=None):
        args = list(args or [])
        if "--type=image" in args:
            if args[-1] in self.images:
                return "sha256:0123456789abcdef"
            raise CommandError([name] + args, "No such image", returncode=1)

        template = next(arg for arg in args if arg.startswith("--format="))
        target = args[-1]
        if "--type=container" not in args and target in self.images and target not in self.existing:
            return "sha256:0123456789abcdef" if template == "--format={{.Id}}" else ""
        if target not in self.existing:
            raise CommandError([name] + args, f"No such object: {target}", returncode=1)
        if template == "--format={{.State.Running}}":
            return "true" if target in self.running else "false"
        if template == "--format={{.State.Paused}}":
            return "true" if target in self.paused else "false"
        if template == "--format={{.Id}}":
            return f"{target}-0123456789abcdef"
        running = "true" if target in self.running else "false"
        return f"{target}-0123456789abcdef\t{running}\t172.17.0.2"

    def _track(self, args):
        verb, target = args[0], args[-1]
        if verb == "run":
            target = args[args.index("--name") + 1]
            self.existing.add(target)
            self.running.add(target)
        elif verb == "start":
            self.running.add(target)
        elif verb in ("stop", "kill"):
            self.running.discard(target)
            self.paused.discard(target)
        elif verb == "pause":
            self.paused.add(target)
        elif verb == "unpause":
            self.paused.discard(target)
        elif verb == "rm":
            self.existing.discard(target)
        elif verb == "pull":
            self.images.add(target)
        elif verb == "build":
            self.images.update(arg[len("--tag="):] for arg in args if arg.startswith("--tag="))


@pytest.fixture
def recording_runner():
    """Factory for runners with a given set of container states."""
    return RecordingRunner
