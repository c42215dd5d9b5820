"""Shared constants for gitdeploy."""

DEPLOY_REPO = ".git-deploy"
DEPLOY_BRANCH = "master"
DEPLOY_REMOTE = "origin"
DEPLOY_COMMIT_MESSAGE = "Deploy ${BUILD_TAG}"

DEFAULT_COMMITTER_NAME = "gitdeploy"
DEFAULT_COMMITTER_EMAIL = "gitdeploy@localhost"

ERROR_PREFIX = "Fail to deploy using Git: "
UP_TO_DATE_MESSAGE = "Deploy repository is up-to-date. Nothing to commit."
