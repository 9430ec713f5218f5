"""
Vexil token classification.

- split_passthrough(tokens): cut the argument vector at the first literal "--".
- looks_like_flag(token): anything starting with "-" is a flag candidate and is
  never taken as a value or a positional.
- match_long(token, alias, negatable=...): "--alias", "--alias=value" and, for
  boolean options, "--no-alias" / "--noalias" (never with an inline value; a
  following boolean literal still becomes the value).
- match_short(token, alias, takes_value): "-a", "-abc" clusters, "-nVALUE", "-n=VALUE".

Short clusters are read left to right. A cluster ends at "=" or right after the
first character that is a value-taking alias; whatever follows is that
character's attached value. Only the last character of a cluster may take an
attached or a following value; the other characters are handed back as a new
"-<rest>" token for the aliases still to be matched.
"""
from typing import NamedTuple


class Match(NamedTuple):
    """
    Outcome of matching one alias against one token.

    - negated:   "--no-" / "--no" marker was present (boolean long flags only)
    - value:     inline value ("" for an explicit empty "--name="), None when absent
    - pushback:  synthetic token carrying the unmatched rest of a short cluster, or None
    - lookahead: the following token may be consumed as the value
    """
    negated: bool
    value: str | None
    pushback: str | None
    lookahead: bool


def split_passthrough(tokens, /):
    """
    Return (working tokens, pass-through tokens or None).
    """
    tokens = list(tokens)
    try:
        index = tokens.index("--")
    except ValueError:
        return tokens, None
    return tokens[:index], tuple(tokens[index + 1:])


def looks_like_flag(token, /):
    return token.startswith("-")


def match_long(token, alias, /, *, negatable=False):
    if len(alias) < 2 or not token.startswith("--"):
        return None

    body, separator, value = token[2:].partition("=")
    value = value if separator else None

    if body == alias:
        return Match(False, value, None, value is None)
    if negatable and value is None and body in ("no-" + alias, "no" + alias):
        return Match(True, None, None, True)
    return None


def split_cluster(token, takes_value, /):
    """
    Split "-abc=value" into the cluster of flag characters and the attached text.

    >>> split_cluster("-vn5", lambda x: x == "n")
    ('vn', '5')
    >>> split_cluster("-vx=1", lambda x: False)
    ('vx', '=1')
    """
    body = token[1:]
    for index, char in enumerate(body):
        if char == "=":
            return body[:index], body[index:]
        if takes_value(char):
            return body[:index + 1], body[index + 1:]
    return body, ""


def match_short(token, alias, takes_value, /):
    if len(alias) != 1 or len(token) < 2 or not token.startswith("-") or token.startswith("--"):
        return None

    cluster, attached = split_cluster(token, takes_value)
    if (index := cluster.find(alias)) < 0:
        return None

    rest = cluster[:index] + cluster[index + 1:]

    if index == len(cluster) - 1:
        if attached.startswith("="):
            value = attached[1:]
        else:
            value = attached or None
        return Match(False, value, "-" + rest if rest else None, value is None)

    # Not the last character: the attached text still belongs to the cluster.
    return Match(False, None, "-" + rest + attached, False)


__all__ = (
    "Match",
    "split_passthrough",
    "looks_like_flag",
    "match_long",
    "split_cluster",
    "match_short",
)
