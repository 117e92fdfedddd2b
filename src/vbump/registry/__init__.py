"""Upstream version sources.

- docker_hub.py / artifactory.py / ecr.py: container image tags
- rpm.py: RPM repository primary metadata
- npm.py: npm packuments
- voom.py: git-log derived versions for paths
- literal.py: fixed values from the spec
- dispatch.py: deduplicated concurrent query fan-out
"""
