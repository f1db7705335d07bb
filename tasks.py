# type: ignore
from invoke import task


@task
def venv(ctx):
    """Create the development environment with uv, extras included."""
    ctx.run("uv sync --all-extras")


@task
def lint(ctx):
    """
    Check style with ruff and types with mypy.
    """
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx, network=False):
    """
    Run tests with coverage information.

    The transport tests bind local sockets; ``--network`` is not needed for
    them, it additionally runs a real SSDP search on the local network.
    """
    ctx.run("pytest --cov=lighthouse --cov-report=term-missing", pty=True)
    if network:
        ctx.run("lighthouse --log-level DEBUG discover", pty=True)


@task
def build_package(ctx):
    """
    Build package using uv.
    """
    ctx.run("rm -rf dist")
    ctx.run("uv build")
