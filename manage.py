# manage.py
import sys

from app import create_app
from tunebox.database.db_manager import db

USAGE = "Usage: python manage.py [create_db | clear_all | purge_orphans]"


def create_db():
    """Creates the database tables."""
    app = create_app()
    with app.app_context():
        db.create_all()
        print(f"Database tables ready at {app.config['SQLALCHEMY_DATABASE_URI']}")


def clear_all():
    """Deletes every playlist, song and uploaded file."""
    app = create_app()
    with app.app_context():
        summary = app.extensions['library_service'].clear_all()
        print(
            f"Deleted {summary.playlists_deleted} playlist(s), "
            f"{summary.songs_deleted} song(s), {summary.files_deleted} file(s)"
        )


def purge_orphans():
    """Deletes songs (and their files) whose playlist no longer exists."""
    app = create_app()
    with app.app_context():
        removed = app.extensions['library_service'].purge_orphans()
        print(f"Purged {removed} orphaned song(s)")


COMMANDS = {
    'create_db': create_db,
    'clear_all': clear_all,
    'purge_orphans': purge_orphans,
}


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print(f"No command provided. {USAGE}")
        return 1
    command = COMMANDS.get(args[0])
    if command is None:
        print(f"Unknown command: {args[0]}")
        print(USAGE)
        return 1
    command()
    return 0


if __name__ == '__main__':
    sys.exit(main())
