# File: src/git_branch_deploy/__main__.py
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from pydantic import ValidationError

from .deployer import Deployer
from .errors import DeployError, describe_failure
from .logging import configure_logging, get_logger
from .models.deploy import DeployType
from .settings import Settings
from .sites import fetch_site, render_site

logger = get_logger("git_branch_deploy.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-branch-deploy",
        description="Publish build output to a branch of the GitHub repository.",
        epilog=(
            "Without a command, deploys the type given by DEPLOY_TYPE "
            "(or INPUT_DEPLOY_TYPE) using GITHUB_TOKEN and GITHUB_REPOSITORY."
        ),
    )
    commands = parser.add_subparsers(dest="command")

    deploy = commands.add_parser("deploy", help="deploy build output to its target branch")
    deploy.add_argument(
        "deploy_type",
        nargs="?",
        choices=[t.value for t in DeployType],
        help="artifact kind; defaults to DEPLOY_TYPE",
    )
    deploy.add_argument("--workspace", help="directory holding build/ and assets/ (default: WORKSPACE or .)")
    deploy.add_argument(
        "--keep-history",
        action="store_true",
        help="commit on top of the previous deployment instead of replacing the branch history",
    )

    site = commands.add_parser("site", help="show one site record from the published API")
    site.add_argument("site_id")
    site.add_argument("--base-url", help="URL the gh-pages branch is served from (default: SITE_BASE_URL)")
    site.add_argument("--repo-url", help="repository URL for the edit link (default: SITE_REPO_URL)")
    return parser


def _run_deploy(args: argparse.Namespace, settings: Settings) -> int:
    update = {}
    if getattr(args, "workspace", None):
        update["WORKSPACE"] = args.workspace
    if getattr(args, "keep_history", False):
        update["KEEP_HISTORY"] = True
    if update:
        settings = settings.model_copy(update=update)
    settings.log_summary()

    try:
        result = Deployer(settings).run(getattr(args, "deploy_type", None))
    except DeployError as e:
        logger.error("Deployment failed", **e.to_dict())
        sys.stderr.write(f"Deployment failed: {describe_failure(e)}\n")
        return 1
    except Exception as e:
        logger.exception("Deployment failed with an unexpected error")
        sys.stderr.write(f"Deployment failed: {describe_failure(e)}\n")
        return 1

    sys.stdout.write(f"{result.message}\n")
    return 0


def _run_site(args: argparse.Namespace, settings: Settings) -> int:
    base_url = args.base_url or settings.SITE_BASE_URL
    if not base_url:
        sys.stderr.write("site: provide --base-url or SITE_BASE_URL\n")
        return 2

    view = fetch_site(args.site_id, base_url, timeout=settings.HTTP_TIMEOUT_SECONDS)
    output = render_site(view, repo_url=args.repo_url or settings.SITE_REPO_URL or None)
    if output:
        sys.stdout.write(f"{output}\n")
    return 1 if view.state == "fail" else 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for CI jobs.

    Examples:
      # GitHub Actions style: everything from the environment
      GITHUB_TOKEN=... GITHUB_REPOSITORY=owner/repo DEPLOY_TYPE=frontend git-branch-deploy

      # explicit type and workspace
      git-branch-deploy deploy backend --workspace ./backend

      # read a published site record back
      git-branch-deploy site 42 --base-url https://owner.github.io/repo
    """
    args = build_parser().parse_args(argv)

    try:
        settings = Settings()
    except ValidationError as e:
        sys.stderr.write(f"Invalid configuration: {e}\n")
        return 1

    configure_logging(
        settings.LOG_LEVEL,
        service_name="git-branch-deploy",
        structured=settings.LOG_FORMAT == "json",
    )

    if args.command == "site":
        return _run_site(args, settings)
    return _run_deploy(args, settings)


if __name__ == "__main__":
    sys.exit(main())
