# -*- coding: utf-8 -*-
from . import res_partner
from . import dojo_rank_history
