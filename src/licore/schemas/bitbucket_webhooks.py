"""Pydantic models for Bitbucket Server webhook payloads."""

from pydantic import BaseModel, ConfigDict, Field


class BitbucketModel(BaseModel):
    """Base model accepting Bitbucket's camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)


class BitbucketUser(BitbucketModel):
    """Bitbucket user."""

    name: str
    slug: str
    display_name: str | None = Field(None, alias="displayName")


class BitbucketProject(BitbucketModel):
    """Bitbucket project info."""

    key: str
    name: str | None = None


class BitbucketRepository(BitbucketModel):
    """Bitbucket repository info."""

    slug: str
    name: str
    project: BitbucketProject


class BitbucketRef(BitbucketModel):
    """Branch reference of a pull request."""

    id: str
    display_id: str | None = Field(None, alias="displayId")
    latest_commit: str = Field(..., alias="latestCommit")
    repository: BitbucketRepository


class BitbucketParticipant(BitbucketModel):
    """Author or reviewer of a pull request."""

    user: BitbucketUser
    role: str | None = None


class BitbucketPullRequest(BitbucketModel):
    """Pull request details."""

    id: int
    title: str = ""
    state: str = "OPEN"
    from_ref: BitbucketRef = Field(..., alias="fromRef")
    to_ref: BitbucketRef = Field(..., alias="toRef")
    author: BitbucketParticipant


class PullRequestEvent(BitbucketModel):
    """pr:* webhook payload."""

    event_key: str = Field(..., alias="eventKey")
    pull_request: BitbucketPullRequest = Field(..., alias="pullRequest")
