# -*- coding: utf-8 -*-
from . import rank_api
