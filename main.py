"""
Rent Reclaimer - CLI Entrypoint
===============================
    python main.py run
    python main.py run --watch --interval 60
    python main.py run --json
    python main.py status
    python main.py notify
"""

from rent_reclaimer.cli import app


if __name__ == "__main__":
    app()
