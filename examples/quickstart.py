#!/usr/bin/env python3
"""apphost quickstart -- one application, three requests.

Demonstrates the core workflow of the application host:

1. Write an application manifest into a temporary applications directory.
2. Create the manifest loader, access evaluator and dispatcher.
3. Bind a controller to its execution context.
4. Dispatch requests for an anonymous visitor and a logged-in writer.
5. Read filtered request variables.

Run:
    python examples/quickstart.py
"""
from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

from apphost import (
    AccessEvaluator,
    Controller,
    Dispatcher,
    ExecutionContext,
    HostConfig,
    InMemoryRenderer,
    InMemorySession,
    ManifestLoader,
    Principal,
    RequestStore,
    Scoped,
)

MANIFEST = """\
<manifest>
    <name>news</name>
    <version>1.0</version>
    <action default="default" alias="index">listing</action>
    <action requires="connected,writer" alias="new,add">create</action>
    <permission name="writer" />
</manifest>
"""


class NewsController(Controller):

    def listing(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"items": ["Release 1.0", "Call for talks"]}

    def create(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"created": params["title"]}

    HANDLERS = {
        "listing": listing,
        "create": create,
    }


def main() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        root = Path(tmp)

        # -- Step 1: Write the application manifest -------------------------
        app_dir = root / "apps" / "news"
        app_dir.mkdir(parents=True)
        (app_dir / "manifest.xml").write_text(MANIFEST, encoding="utf-8")
        print(f"[1] Application written: {app_dir}")

        # -- Step 2: Create the host components -----------------------------
        loader = ManifestLoader(HostConfig(apps_dir=root / "apps", cache_dir=root / "cache"))
        session = InMemorySession()
        dispatcher = Dispatcher(AccessEvaluator(loader), session, InMemoryRenderer())
        print(f"[2] Applications found: {loader.discover()}")

        # -- Step 3: Bind a controller --------------------------------------
        controller = NewsController()
        controller.init(ExecutionContext("news", app_dir), loader)

        # -- Step 4: Dispatch -----------------------------------------------
        response = dispatcher.run(controller, "index")
        print(f"[3] index  -> {response.status} {response.action}: {response.data}")

        response = dispatcher.run(controller, "add", {"title": "Hello"})
        print(f"[4] add    -> {response.status}: {response.note.message if response.note else ''}")

        session.set_principal(Principal(Scoped({"news": {"writer"}}), connected=True))
        response = dispatcher.run(controller, "add", {"title": "Hello"})
        print(f"[5] add    -> {response.status} {response.action}: {response.data}")

        # -- Step 5: Request variables --------------------------------------
        request = RequestStore(body={"title": "<b>Hi</b><script>alert(1)</script>"}, method="post")
        print(f"[6] {request.method} title = {request.get('title')!r}")


if __name__ == "__main__":
    main()
