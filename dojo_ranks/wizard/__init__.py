# -*- coding: utf-8 -*-
from . import promote_wizard
