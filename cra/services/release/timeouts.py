from __future__ import annotations

# GH read operations (release list)
GH_TIMEOUT_SECONDS = 60.0

# Idempotent GH read retry policy
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0

# Helm binary download
HELM_DOWNLOAD_TIMEOUT_SECONDS = 120.0
