"""Line-based per-package status output for the terminal."""

from __future__ import annotations

import click

from monopack.progress import ProgressBroadcaster

ERROR_SYMBOL = click.style("✖", fg="red", bold=True)
SUCCESS_SYMBOL = click.style("✔", fg="green", bold=True)
WARNING_SYMBOL = click.style("⚠", fg="yellow")

_DONE_MESSAGES = {
    "already-published": "Nothing has changed, published version {version} is already up-to-date",
    "initial-version": "First version {version} has been published",
    "new-version": "New version {version} published",
    "built": "Built version {version}",
}


class TerminalStatusRenderer:
    """Prints one line per status change; finished packages ignore further updates."""

    def __init__(self, echo=click.echo):
        self.echo = echo
        self.active: dict[str, str] = {}

    def add(self, package_name: str, message: str) -> None:
        self.active[package_name] = message
        self.echo(f"{click.style(package_name, bold=True)}: {message}")

    def update_message(self, package_name: str, message: str) -> None:
        if package_name not in self.active:
            return
        self.active[package_name] = message
        self.echo(f"{click.style(package_name, bold=True)}: {click.style(message, dim=True)}")

    def stop(self, package_name: str, success: bool, message: str) -> None:
        self.active.pop(package_name, None)
        symbol = SUCCESS_SYMBOL if success else ERROR_SYMBOL
        self.echo(f"{symbol} {click.style(package_name, bold=True)}: {message}")

    def stop_all(self) -> None:
        self.active.clear()

    def attach(self, progress: ProgressBroadcaster) -> None:
        progress.on("scheduled", lambda p: self.add(p["package_name"], "Scheduled …"))
        progress.on("resolving", lambda p: self.update_message(p["package_name"], "Resolving files"))
        progress.on("linking", lambda p: self.update_message(p["package_name"], "Linking sibling packages"))
        progress.on("building", lambda p: self.update_message(
            p["package_name"], f"Building package with version {p['version']}"))
        progress.on("rebuilding", lambda p: self.update_message(
            p["package_name"], f"Rebuilding package with version {p['version']}"))
        progress.on("publishing", lambda p: self.update_message(
            p["package_name"], f"Publishing version {p['version']}"))
        progress.on("done", lambda p: self.stop(
            p["package_name"], True, _DONE_MESSAGES[p["status"]].format(version=p["version"])))
        progress.on("error", lambda p: self.stop(p["package_name"], False, str(p["error"])))
