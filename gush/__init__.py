# The MIT License (MIT)
# Copyright © 2025 Entrius

__version__ = '1.0.0'
