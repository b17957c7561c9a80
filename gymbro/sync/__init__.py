# -*- coding: utf-8 -*-
"""Client side of cloud sync: session, HTTP client and the periodic pusher."""
