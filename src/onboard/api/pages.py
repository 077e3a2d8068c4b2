"""Minimal HTML pages for the browser flow."""

from __future__ import annotations

from html import escape
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from onboard.workflow.models import WorkflowSpec

_LAYOUT = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Technical Onboarding</title>
</head>
<body>
{body}
</body>
</html>
"""

# Opens the run socket and appends one line per event.
_SOCKET_SCRIPT = """<script>
  const scheme = window.location.protocol === "https:" ? "wss://" : "ws://";
  const socket = new WebSocket(scheme + window.location.host + "/workload/socket");
  const log = document.getElementById("events");
  socket.onmessage = (message) => {
    const event = JSON.parse(message.data);
    const item = document.createElement("li");
    item.className = event.kind;
    item.textContent = event.message + (event.error ? " (" + event.error + ")" : "");
    log.appendChild(item);
  };
</script>"""


def index_page(username: str | None = None) -> str:
    if username:
        body = (
            f"<p>Signed in as <strong>{escape(username)}</strong>.</p>\n"
            '<p><a href="/workload">Set up my onboarding project</a></p>'
        )
    else:
        body = '<p><a href="/auth">Sign in with GitHub</a></p>'
    return _LAYOUT.format(body=f"<h1>Technical Onboarding</h1>\n{body}")


def workload_page(username: str, spec: WorkflowSpec) -> str:
    """Page listing the tasks and streaming the run's events."""
    tasks = "\n".join(f"  <li>{escape(task.title)}</li>" for task in spec.tasks)
    body = (
        f"<h1>Welcome @{escape(username)}!</h1>\n"
        f"<p>Preparing your board in <code>{escape(spec.full_name)}</code>.</p>\n"
        f"<ul>\n{tasks}\n</ul>\n"
        '<ol id="events"></ol>\n'
        f"{_SOCKET_SCRIPT}"
    )
    return _LAYOUT.format(body=body)
