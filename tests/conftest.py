import os
import tempfile

# Keep run logs out of the working tree
os.environ.setdefault("AI_SECRETARY_LOG_DIR", tempfile.mkdtemp(prefix="ai-secretary-logs-"))
