"""Process-wide lock around Taichi kernel launches and field access.

Render workers launch kernels from their own threads. Any other launch or
field access that can overlap a running render (Python-side queries,
scene uploads, the preview window) holds ``kernel_lock`` as well. The
lock is reentrant so a holder may call helpers that take it again.
"""

import threading

kernel_lock = threading.RLock()
