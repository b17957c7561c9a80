# -*- coding: utf-8 -*-
"""Local tracker data: storage backends, the AppData document and the domain manager."""
