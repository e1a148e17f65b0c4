"""
main.py — Design Handoff
========================
Interactive CLI for trying the sign-in handoff end to end.

Usage:
    python main.py

Session commands:
    <message>                    Record an anonymous chat message
    file <path> <content>        Record a generated file in the anonymous work
    work                         Show the anonymous work held for this session
    signup <email> <password>    Create an account and land on a project
    signin <email> <password>    Sign in and land on a project
    projects                     List your projects (signed in only)
    signout                      Sign out (anonymous work is kept)
    new                          Discard the anonymous work
    exit                         Quit the program

Anonymous work lives in memory unless HANDOFF_WORK_STORE_PATH points at a
JSON file, in which case it survives restarts.
"""

import asyncio
import traceback

from frontend.api import session_store as store
from frontend.api.accounts import SessionAuthGateway, SessionProjectDirectory
from handoff import config
from handoff.config import configure_logging
from handoff.reconciler import SessionReconciler
from handoff.states import ReconcilerEvent
from handoff.work_store import JsonFileWorkStore


# ─────────────────────────────────────────────────────────────────────────────
# Display helpers
# ─────────────────────────────────────────────────────────────────────────────

class PrintingNavigator:
    """Stands in for the browser router: 'navigating' just prints the target."""

    def go_to(self, path: str) -> None:
        print(f"\n  → Opening {path}")


def print_phase(event: ReconcilerEvent) -> None:
    print(f"  [{event.phase.value}]{' …' if event.is_loading else ''}")


def display_work(session: store.Session) -> None:
    snapshot = session.work.get()
    if snapshot is None or not (snapshot.messages or snapshot.file_system_data):
        print("[ No anonymous work yet. ]")
        return

    divider = "=" * 60
    print(f"\n{divider}")
    print(f"  Messages : {len(snapshot.messages or [])}")
    for message in snapshot.messages or []:
        print(f"    • {message.get('role', 'user')}: {message.get('content', '')[:80]}")
    print(f"  Files    : {len(snapshot.file_system_data)}")
    for path in sorted(snapshot.file_system_data):
        print(f"    • {path}")
    print(divider)


def display_projects(session: store.Session) -> None:
    if not session.is_authenticated:
        print("[ Sign in to see your projects. ]")
        return

    projects = SessionProjectDirectory(session).stored_projects()
    if not projects:
        print("[ No projects yet. ]")
        return
    for project in projects:
        print(f"  /{project.id}  {project.name}  ({len(project.messages)} messages, {len(project.data)} files)")


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────

def authenticate(session: store.Session, mode: str, args: list[str]) -> None:
    if len(args) != 2:
        print(f"Usage: {mode} <email> <password>")
        return

    reconciler = SessionReconciler(
        auth_gateway=SessionAuthGateway(session),
        work_store=session.work,
        project_directory=SessionProjectDirectory(session),
        navigator=PrintingNavigator(),
    )
    reconciler.subscribe(print_phase)
    run = reconciler.sign_up if mode == "signup" else reconciler.sign_in

    result = asyncio.run(run(args[0], args[1]))
    if not result.success:
        print(f"\n[ {result.error} ]")
    elif reconciler.last_route.adopted:
        print("  Your anonymous work was saved into this project.")


# ─────────────────────────────────────────────────────────────────────────────
# Main CLI loop
# ─────────────────────────────────────────────────────────────────────────────

def run() -> None:
    """
    Interactive REPL over a single in-process browser session.
    """
    configure_logging("WARNING")

    session = store.get_or_create(None)
    if config.WORK_STORE_PATH:
        session.work = JsonFileWorkStore(config.WORK_STORE_PATH)

    print()
    print("╔══════════════════════════════════════════════════════╗")
    print("║              Design Handoff  (v1.0)                 ║")
    print("╚══════════════════════════════════════════════════════╝")
    print()
    print("Chat anonymously, then sign up or sign in to keep your work.")
    print("Commands:  work | file | signup | signin | projects | signout | new | exit")
    print()

    while True:
        try:
            user_input = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye!")
            break

        if not user_input:
            continue

        command, *args = user_input.split()
        command = command.lower()

        try:
            if command == "exit":
                print("Goodbye!")
                break
            elif command == "work":
                display_work(session)
            elif command == "file":
                parts = user_input.split(maxsplit=2)
                if len(parts) < 3:
                    print("Usage: file <path> <content>")
                    continue
                session.work.write_file(parts[1], parts[2])
                print(f"[ Recorded {parts[1]} ]")
            elif command in ("signup", "signin"):
                authenticate(session, command, args)
            elif command == "projects":
                display_projects(session)
            elif command == "signout":
                store.sign_out(session)
                print("[ Signed out. ]")
            elif command == "new":
                session.work.clear()
                print("\n[ Anonymous work discarded. ]\n")
            else:
                store.record_turn(session, "user", user_input)
                print("[ Recorded. Sign in to keep it. ]")
        except Exception:
            traceback.print_exc()
            print("\n[ERROR] Command failed. Try again or type 'exit' to quit.\n")

        print()


# ─────────────────────────────────────────────────────────────────────────────
# Entry point
# ─────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    run()
