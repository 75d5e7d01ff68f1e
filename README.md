# arctools

Helpers for running self-hosted GitHub Actions runners:

- **Label globbing** (`arctools.actionsglob`): match runner labels against
  Actions-style patterns (`*` wildcards and a leading `!` to negate).
- **Runner group visibility** (`arctools.runnergroups`,
  `arctools.visibility`): work out which organization and enterprise runner
  groups a repository can see, in order of precedence.
- **Webhook delivery forwarding** (`arctools.forwarder`,
  `arctools.multiforwarder`, `arctools.webhookdelivery`): poll the delivery
  log of a GitHub repository or organization hook and POST each new
  delivery's payload to another URL. This is handy when the machine that
  handles webhooks cannot be reached from GitHub.

## Installation

```
pip install arctools
```

The only runtime dependency is `httpx`.

## Label globbing

```python
from arctools.actionsglob import match

match("foo*", "foobar")                                 # True
match("*foo", "foobar")                                 # False
match("actions-*-metrics", "actions-workflow-metrics")  # True
match("!foo", "foo")                                    # False
```

An empty pattern raises `ValueError`.

## Runner groups

```python
from arctools.runnergroups import VisibleRunnerGroups, new_runner_group_from_properties

groups = VisibleRunnerGroups()
groups.add(new_runner_group_from_properties("", "myorg", "group1"))
groups.add(new_runner_group_from_properties("", "myorg", ""))
groups.add(new_runner_group_from_properties("myenterprise", "", ""))

def visit(group):
    print(group)
    return False  # returning True stops the traversal

groups.traverse(visit)
```

A `RunnerGroup` has a `scope` (`RunnerGroupScope.ORGANIZATION` or
`ENTERPRISE`), a `kind` (`RunnerGroupKind.DEFAULT` or `CUSTOM`) and a
`name`; an empty group name means the default group. `add` keeps default
groups before custom ones and, within each kind, organization groups
before enterprise groups. `new_runner_group_from_github` builds a group
from a runner group object of the GitHub API (its `default`, `name` and
`inherited` fields).

`arctools.visibility.Simulator` takes a client and returns, from a set of
managed groups, those that a repository in an organization can use. On
`https://github.com/` it asks for the organization's runner groups for the
repository; otherwise it lists all the organization's groups and, for any
whose `visibility` is not `all`, checks the group's repository access list.

## Forwarding hook deliveries

Two commands are installed. Both read the token from `--github-token` or
the `GITHUB_TOKEN` environment variable, and exit with an error if none is
given.

### `hookdeliveryforwarder`

Takes one or more `--rule` options. Each rule is a JSON object naming the
sources, the target, and optionally the hook to create when a source has
none:

```
GITHUB_TOKEN=token hookdeliveryforwarder \
  --rule '{"from": ["myorg/myrepo", "myorg"], "to": "http://localhost:8080/",
           "hook": {"config": {"url": "https://hooks.example.com/"}}}'
```

A source of the form `owner/repo` uses the repository's first hook, and a
bare `owner` uses the organization's first hook. When a source has no
hook, one is created from the rule's `hook`, which must carry
`config.url`; `content_type` defaults to `json`, `insecure_ssl` to `0`,
`secret` to the `GITHUB_HOOK_SECRET` environment variable, `events` to
`check_run` and `push`, and `active` to true.

Deliveries are polled every 10 seconds and forwarded oldest first. If a
POST to the target fails, the batch is retried after 5 seconds.

Other options: `--metrics-addr` (default `:8000`) and `--log-level`
(`debug`, `info`, `warn`, `error`).

### `githubwebhookdeliveryforwarder`

Forwards the deliveries of the first hook of a single repository, given as
`OWNER/REPO`:

```
GITHUB_TOKEN=token githubwebhookdeliveryforwarder \
  --repo myorg/myrepo --target http://localhost:8080/
```

It also takes `--metrics-addr` (default `:8000`).

### Readiness probes

Both commands serve `/readyz` on the `--metrics-addr` address: `GET`
answers `webhook server is running`, other methods answer `ok`, and any
other path answers 404. `arctools.readyz.make_readyz_server` builds the
same server for use elsewhere.

Both commands stop cleanly on the first SIGINT or SIGTERM and exit at once
on the second. Run either with `--help` to see all options.

## What is not included

- Only personal access tokens are supported; there is no GitHub App or
  basic-auth login.
- The forwarding position is kept in memory only
  (`arctools.checkpointer.InMemoryCheckpointer`). After a restart,
  forwarding starts again from the current time, so deliveries made while
  the command was down are not forwarded. Other storage can be plugged in
  by passing any object with `get_or_create` and `update` methods as
  `Config.checkpointer` or `MultiForwarder.checkpointer`.
- Despite its name, `--metrics-addr` serves only `/readyz`; no metrics are
  exported.
- `Simulator` needs a client supplied by the caller that provides the
  runner-group API calls described by `arctools.visibility.RunnerGroupClient`;
  the package does not ship one.

## Development

```
pip install -e '.[test]'
pytest
```