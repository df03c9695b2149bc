# Application routes live in v1/; health and /metrics are mounted unversioned from there.
