# -*- coding: utf-8 -*-
"""
rank_api.py
-----------
JSON controllers for belt promotions.

All endpoints are under /api/dojo/v1/ and require a logged-in internal
user; portal and public sessions get a 403.  Promotions are posted in the
member's Chatter like the ones made from the form.

  POST /members/<id>/rank          {"belt", "mode", "stripe_pattern", "degree",
                                    "notes", "fallback_to_manual"}
  POST /members/<id>/stripe        {"notes"}
  GET  /members/<id>/rank_history  ?limit=10
  GET  /belt_distribution

All responses follow the envelope:
  {"ok": true, "data": {...}}   on success
  {"ok": false, "error": "..."} on failure
"""

import logging

from dojo_rank_ledger import (
    ConcurrentPromotion,
    InvalidRequest,
    MemberNotFound,
    PersistenceFailure,
    service,
)

from odoo import http
from odoo.http import request

from ..models.rank_store import OdooRankStore

_logger = logging.getLogger(__name__)

API_BASE = '/api/dojo/v1'


def _ok(data):
    return request.make_json_response({'ok': True, 'data': data})


def _err(msg, code=400):
    return request.make_json_response({'ok': False, 'error': msg}, status=code)


def _body():
    try:
        return request.get_json_data() or {}
    except ValueError:
        return {}


def _run(operation, *args, **kwargs):
    """Call a ledger operation and map its errors onto HTTP codes."""
    try:
        return operation(*args, **kwargs), None
    except MemberNotFound as e:
        return None, _err(str(e), 404)
    except InvalidRequest as e:
        return None, _err(str(e), 400)
    except ConcurrentPromotion as e:
        return None, _err(str(e), 409)
    except PersistenceFailure as e:
        _logger.warning('Rank API write failed: %s', e)
        return None, _err('Promotion not applied', 500)


def _staff_error():
    if not request.env.user._is_internal():
        return _err('Staff access required', 403)
    return None


def _outcome_data(outcome):
    return {
        'history_entry_id': outcome.history_entry_id,
        'previous': outcome.previous_state.to_dict(),
        'rank': outcome.next_state.to_dict(),
    }


# ─────────────────────────────────────────────────────────────────────────────
class DojoRankAPI(http.Controller):

    def _store(self):
        return OdooRankStore(request.env)

    def _actor(self):
        return str(request.env.user.partner_id.id)

    def _member(self, member_id):
        return request.env['res.partner'].browse(member_id)

    # ── Promotions ───────────────────────────────────────────────────────────
    @http.route(f'{API_BASE}/members/<int:member_id>/rank', type='http', auth='user',
                methods=['POST'], csrf=False)
    def promote(self, member_id, **kwargs):
        error = _staff_error()
        if error:
            return error
        body = _body()
        outcome, error = _run(
            self._member(member_id)._dojo_apply,
            service.promote_member,
            body.get('belt'),
            mode=body.get('mode') or 'manual',
            manual_pattern=body.get('stripe_pattern'),
            degree=body.get('degree'),
            note=body.get('notes'),
            actor=self._actor(),
            fallback_to_manual=bool(body.get('fallback_to_manual')),
            known_belts_only=True,
        )
        if error:
            return error
        return _ok(_outcome_data(outcome))

    @http.route(f'{API_BASE}/members/<int:member_id>/stripe', type='http', auth='user',
                methods=['POST'], csrf=False)
    def add_stripe(self, member_id, **kwargs):
        error = _staff_error()
        if error:
            return error
        body = _body()
        outcome, error = _run(
            self._member(member_id)._dojo_apply, service.add_stripe,
            actor=self._actor(), note=body.get('notes'),
        )
        if error:
            return error
        return _ok(_outcome_data(outcome))

    # ── History ──────────────────────────────────────────────────────────────
    @http.route(f'{API_BASE}/members/<int:member_id>/rank_history', type='http', auth='user',
                methods=['GET'])
    def rank_history(self, member_id, limit=service.DEFAULT_HISTORY_LIMIT, **kwargs):
        error = _staff_error()
        if error:
            return error
        max_limit = request.env['res.partner']._dojo_history_max_limit()
        entries, error = _run(
            service.get_rank_history, self._store(), member_id,
            limit=limit, max_limit=max_limit,
        )
        if error:
            return error
        return _ok({'history': [e.to_dict() for e in entries]})

    # ── Reporting ────────────────────────────────────────────────────────────
    @http.route(f'{API_BASE}/belt_distribution', type='http', auth='user', methods=['GET'])
    def belt_distribution(self, **kwargs):
        error = _staff_error()
        if error:
            return error
        report = service.belt_distribution(self._store())
        return _ok({
            'total': report.total,
            'distribution': [{
                'belt': row.belt,
                'label': row.label,
                'count': row.count,
                'stripes': {str(k): v for k, v in row.stripes.items()},
            } for row in report.rows],
        })
