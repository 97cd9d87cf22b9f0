# -*- coding: utf-8 -*-
"""
rank_store.py
-------------
Database-backed implementation of dojo_rank_ledger.RankStore.

Member ranks live on res.partner, promotion history in dojo.rank.history.
apply_promotion_atomic() locks the member row, checks the rank version
and writes both inside one savepoint: if anything fails the savepoint is
rolled back and neither write is visible.
"""

import logging

from dojo_rank_ledger import ConcurrentPromotion, MemberNotFound, PersistenceFailure, RankStore
from dojo_rank_ledger.constants import StripeMode

_logger = logging.getLogger(__name__)

# Context key that lets the store write rank fields on res.partner.
LEDGER_WRITE_CTX = 'dojo_rank_ledger_write'


def partner_vals_from_record(record):
    """res.partner values for a persisted rank record."""
    has_degree = record.get('degree') is not None
    return {
        'belt_rank': record['belt'],
        'stripe_count': record['stripe_count'],
        'stripe_pattern': record.get('stripe_pattern') or False,
        'stripe_mode': StripeMode.CURRICULUM.value if has_degree else StripeMode.MANUAL.value,
        'kids_degree': record['degree'] if has_degree else 0,
        'rank_version': record.get('version') or 0,
    }


class OdooRankStore(RankStore):

    def __init__(self, env):
        self.env = env

    def _partner(self, member_id):
        try:
            partner = self.env['res.partner'].browse(int(member_id)).exists()
        except (TypeError, ValueError):
            partner = self.env['res.partner']
        if not partner:
            raise MemberNotFound('member %s not found' % member_id)
        return partner

    def read_rank_state(self, member_id):
        return self._partner(member_id)._dojo_rank_state()

    def apply_promotion_atomic(self, member_id, result):
        partner = self._partner(member_id)
        expected_version = result.next_state.version - 1
        History = self.env['dojo.rank.history'].sudo()
        history_vals = History._vals_from_entry(partner.id, result.history_entry)
        vals = partner_vals_from_record(result.record)
        vals.update({
            'last_promotion_dt': history_vals['awarded_dt'],
            'last_promoted_by_id': history_vals['awarded_by_id'],
        })
        try:
            with self.env.cr.savepoint():
                self.env.cr.execute(
                    'SELECT rank_version FROM res_partner WHERE id = %s FOR UPDATE',
                    (partner.id,),
                )
                row = self.env.cr.fetchone()
                stored_version = (row[0] or 0) if row else 0
                if stored_version != expected_version:
                    raise ConcurrentPromotion(
                        'member %s is at version %d, promotion expected %d'
                        % (partner.id, stored_version, expected_version))
                partner.sudo().with_context(**{LEDGER_WRITE_CTX: True}).write(vals)
                History.with_context(**{LEDGER_WRITE_CTX: True}).create(history_vals)
        except PersistenceFailure:
            raise
        except Exception as e:
            _logger.warning('Rank promotion of partner %s rolled back: %s', partner.id, e)
            raise PersistenceFailure('could not store promotion of member %s' % partner.id) from e

    def list_history(self, member_id, limit):
        records = self.env['dojo.rank.history'].sudo().search(
            [('member_id', '=', int(member_id))], limit=limit,
        )
        return (rec._to_entry() for rec in records)

    def iter_member_states(self):
        members = self.env['res.partner'].sudo().search([('is_member', '=', True)])
        for partner in members:
            yield partner._dojo_rank_state()
