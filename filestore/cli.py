# cli.py
import logging

import click

from filestore.core.config import get_settings
from filestore.core.security import hash_password
from filestore.models import file  # noqa: F401  needed to resolve User.files
from filestore.models.database import Base, SessionLocal, engine
from filestore.models.user import User

logger = logging.getLogger(__name__)


@click.group()
def cli():
    """Filestore management commands"""
    pass


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:")
    click.echo(f"  Database URL: {settings.database_url}")
    click.echo(f"  Storage Backend: {settings.storage_backend}")
    click.echo(f"  Upload Dir: {settings.upload_dir}")
    click.echo(f"  S3 Bucket: {settings.aws_s3_bucket_name}")
    click.echo(f"  Allowed Types: {', '.join(settings.allowed_content_types)}")
    click.echo(f"  Log Level: {settings.log_level}")


@cli.command()
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
def create_admin(username, password):
    """Create an admin user, or promote an existing user to admin."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.username == username).first()
        if user:
            user.is_admin = True
            user.password = hash_password(password)
            action = "Promoted"
        else:
            user = User(username=username, password=hash_password(password), is_admin=True)
            db.add(user)
            action = "Created"
        db.commit()
        click.echo(f"{action} admin {username} (id: {user.id})")
    finally:
        db.close()


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
def serve(host, port):
    """Run the API with uvicorn"""
    import uvicorn

    uvicorn.run("filestore.main:app", host=host, port=port)


if __name__ == "__main__":
    cli()
