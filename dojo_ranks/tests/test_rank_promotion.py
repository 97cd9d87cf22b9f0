# -*- coding: utf-8 -*-
import json
from unittest.mock import patch

from dojo_rank_ledger import stripes

from odoo.exceptions import AccessError, UserError
from odoo.tests import tagged
from odoo.tests.common import HttpCase, TransactionCase, new_test_user
from odoo.tools import mute_logger

from ..models.rank_store import LEDGER_WRITE_CTX


@tagged('post_install', '-at_install')
class TestRankPromotion(TransactionCase):

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        Partner = cls.env['res.partner']
        cls.adult = Partner.create({
            'name': 'Adult Member',
            'is_member': True,
            'belt_rank': 'blue',
            'stripe_count': 2,
        })
        cls.kid = Partner.create({
            'name': 'Kid Member',
            'is_member': True,
            'belt_rank': 'kids-grey',
        })
        cls.coach = new_test_user(cls.env, login='rank_coach', groups='base.group_user')

    def test_promotion_updates_member_and_history(self):
        self.adult.dojo_promote('purple', note='  Great work  ')

        self.assertEqual(self.adult.belt_rank, 'purple')
        self.assertEqual(self.adult.stripe_count, 0)
        self.assertFalse(self.adult.stripe_pattern)
        self.assertEqual(self.adult.rank_version, 1)
        self.assertTrue(self.adult.last_promotion_dt)

        history = self.adult.rank_history_ids
        self.assertEqual(len(history), 1)
        self.assertEqual(history.sequence, 1)
        self.assertEqual(history.previous_belt, 'blue')
        self.assertEqual(history.previous_stripe_count, 2)
        self.assertEqual(history.previous_stripe_pattern, ['white', 'white', 'none', 'none'])
        self.assertEqual(history.new_belt, 'purple')
        self.assertEqual(history.notes, 'Great work')

    def test_manual_pattern_is_normalized(self):
        self.adult.dojo_promote('brown', manual_pattern=['none', 'red', 'bogus', 'white'])
        self.assertEqual(self.adult.stripe_pattern, ['red', 'white', 'none', 'none'])
        self.assertEqual(self.adult.stripe_count, 2)

    def test_history_chain_is_continuous(self):
        self.adult.dojo_promote('blue', manual_pattern=['white', 'white', 'white', 'none'])
        self.adult.dojo_add_stripe()
        self.adult.dojo_promote('purple')

        entries = self.adult.dojo_rank_history(limit=10)
        self.assertEqual([e.sequence for e in entries], [3, 2, 1])
        for newer, older in zip(entries, entries[1:]):
            self.assertEqual(newer.previous, older.next)
        self.assertEqual(len(self.adult.dojo_rank_history(limit=1)), 1)

    def test_add_stripe_fills_next_slot(self):
        self.adult.dojo_add_stripe()
        self.assertEqual(self.adult.stripe_count, 3)
        self.assertEqual(self.adult.stripe_pattern, ['white', 'white', 'white', 'none'])
        self.assertEqual(self.adult.rank_history_ids.notes, 'Stripe added')

    def test_curriculum_degree_on_kids_belt(self):
        self.kid.dojo_promote('kids-grey', mode='curriculum', degree=6)
        self.assertEqual(self.kid.stripe_mode, 'curriculum')
        self.assertEqual(self.kid.kids_degree, 6)
        self.assertEqual(self.kid.stripe_pattern, stripes.as_values(stripes.from_degree(6)))

        self.kid.dojo_add_stripe()
        self.assertEqual(self.kid.kids_degree, 7)

    def test_curriculum_on_adult_belt_is_rejected(self):
        with self.assertRaises(UserError):
            self.adult.dojo_promote('purple', mode='curriculum', degree=3)
        self.assertEqual(self.adult.belt_rank, 'blue')
        self.assertFalse(self.adult.rank_history_ids)

    def test_unknown_belt_is_rejected(self):
        with self.assertRaises(UserError):
            self.adult.dojo_promote('plaid')

    def test_rank_fields_cannot_be_written_directly(self):
        with self.assertRaises(UserError):
            self.adult.write({'belt_rank': 'black'})
        self.adult.write({'phone': '555-0100'})

    def test_history_is_immutable(self):
        self.adult.dojo_promote('purple')
        history = self.adult.rank_history_ids
        with self.assertRaises(UserError):
            history.write({'notes': 'changed'})
        with self.assertRaises(UserError):
            history.unlink()

    def test_history_cannot_be_created_on_its_own(self):
        vals = {
            'member_id': self.adult.id,
            'entry_uid': 'hand-made-entry',
            'sequence': 1,
            'new_belt': 'black',
        }
        History = self.env['dojo.rank.history']
        with self.assertRaises(UserError):
            History.create(vals)
        # Setting the context flag over RPC does not help: the access rights
        # grant no create.
        with self.assertRaises(AccessError):
            History.with_user(self.coach).with_context(**{LEDGER_WRITE_CTX: True}).create(vals)
        self.assertFalse(self.adult.rank_history_ids)
        self.assertEqual(self.adult.rank_version, 0)

    @mute_logger('odoo.addons.dojo_ranks.models.rank_store', 'dojo_rank_ledger.service')
    def test_failed_history_write_rolls_back_member(self):
        History = type(self.env['dojo.rank.history'])
        with patch.object(History, 'create', side_effect=ValueError('history table unavailable')):
            with self.assertRaises(UserError):
                self.adult.dojo_promote('purple')

        self.adult.invalidate_recordset()
        self.assertEqual(self.adult.belt_rank, 'blue')
        self.assertEqual(self.adult.stripe_count, 2)
        self.assertEqual(self.adult.rank_version, 0)
        self.assertFalse(self.adult.rank_history_ids)

        # The member can still be promoted afterwards.
        self.adult.dojo_promote('purple')
        self.assertEqual(self.adult.rank_version, 1)

    def test_promotion_is_posted_in_chatter(self):
        self.adult.dojo_promote('purple')
        body = self.adult.message_ids[0].body
        self.assertIn('<li><b>To:</b> Purple</li>', body)

    def test_promote_wizard(self):
        wizard = self.env['dojo.rank.promote.wizard'].with_context(
            default_partner_id=self.adult.id,
        ).create({
            'belt': 'purple',
            'slot_1': 'red',
            'slot_2': 'none',
            'slot_3': 'none',
            'slot_4': 'none',
        })
        self.assertEqual(wizard.partner_id, self.adult)
        wizard.action_confirm_promotion()
        self.assertEqual(self.adult.belt_rank, 'purple')
        self.assertEqual(self.adult.stripe_pattern, ['red', 'none', 'none', 'none'])

    def test_wizard_curriculum_on_adult_belt_falls_back_to_manual(self):
        wizard = self.env['dojo.rank.promote.wizard'].with_context(
            default_partner_id=self.adult.id,
        ).create({
            'belt': 'purple',
            'stripe_mode': 'curriculum',
            'kids_degree': 2,
            'slot_1': 'white',
            'slot_2': 'none',
            'slot_3': 'none',
            'slot_4': 'none',
        })
        wizard.action_confirm_promotion()
        self.assertEqual(self.adult.stripe_mode, 'manual')
        self.assertEqual(self.adult.stripe_count, 1)


@tagged('post_install', '-at_install')
class TestRankApi(HttpCase):

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.member = cls.env['res.partner'].create({
            'name': 'API Member',
            'is_member': True,
            'belt_rank': 'blue',
        })
        new_test_user(cls.env, login='api_coach', password='api_coach_pw',
                      groups='base.group_user')
        new_test_user(cls.env, login='api_portal', password='api_portal_pw',
                      groups='base.group_portal')

    def _post(self, path, payload):
        return self.url_open(
            '/api/dojo/v1' + path,
            data=json.dumps(payload),
            headers={'Content-Type': 'application/json'},
        )

    def test_promotion_through_api(self):
        self.authenticate('api_coach', 'api_coach_pw')
        response = self._post(f'/members/{self.member.id}/rank', {'belt': 'purple'})
        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['rank']['belt'], 'purple')
        self.assertEqual(data['previous']['belt'], 'blue')

        self.member.invalidate_recordset()
        self.assertEqual(self.member.belt_rank, 'purple')
        self.assertIn('Rank Promotion', self.member.message_ids[0].body)

    def test_unknown_belt_is_a_bad_request(self):
        self.authenticate('api_coach', 'api_coach_pw')
        response = self._post(f'/members/{self.member.id}/rank', {'belt': 'plaid'})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['ok'])

        self.member.invalidate_recordset()
        self.assertEqual(self.member.belt_rank, 'blue')
        self.assertFalse(self.member.rank_history_ids)

    def test_unknown_member_is_not_found(self):
        self.authenticate('api_coach', 'api_coach_pw')
        response = self._post('/members/999999999/rank', {'belt': 'purple'})
        self.assertEqual(response.status_code, 404)

    def test_portal_user_is_refused(self):
        self.authenticate('api_portal', 'api_portal_pw')
        response = self._post(f'/members/{self.member.id}/rank', {'belt': 'black'})
        self.assertEqual(response.status_code, 403)

        self.member.invalidate_recordset()
        self.assertEqual(self.member.belt_rank, 'blue')
