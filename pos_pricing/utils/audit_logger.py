"""Audit Logger for Pricing Results

Keeps a JSONL trail of every priced sale line and a CSV of the lines where a
promotion was applied, one file per day.
"""

import json
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional
from pathlib import Path
import csv
import logging

logger = logging.getLogger(__name__)

CHANGE_COLUMNS = [
    'timestamp', 'product_id', 'product_name', 'channel', 'quantity',
    'base_total', 'total', 'discount', 'promotion_id', 'promotion_name'
]


class PricingAuditLogger:
    """Manages audit logging for pricing results"""

    def __init__(self, log_directory: str = "pricing_logs"):
        """Initialize audit logger with log directory"""
        self.log_directory = Path(log_directory)
        self.log_directory.mkdir(parents=True, exist_ok=True)

        self.decisions_dir = self.log_directory / "decisions"
        self.promotions_dir = self.log_directory / "promotions"

        for dir_path in [self.decisions_dir, self.promotions_dir]:
            dir_path.mkdir(exist_ok=True)

        self._counter = 0

    def log_pricing_decision(self, decision_data: Dict) -> str:
        """Log an audit entry produced by PricingEngine.generate_audit_log"""
        timestamp = self._entry_time(decision_data)

        log_entry = {
            'log_id': self._generate_log_id(),
            'logged_at': datetime.now().isoformat(),
            'version': '1.0',
            **decision_data
        }

        with open(self._decision_file(timestamp.date()), 'a') as f:
            f.write(json.dumps(log_entry) + '\n')

        if decision_data.get('promotion_id') is not None:
            self._log_promotion_applied(decision_data, timestamp.date())

        return log_entry['log_id']

    def _log_promotion_applied(self, decision_data: Dict, day: date):
        """Log a discounted line to CSV for easy analysis"""
        promo_file = self._promotion_file(day)
        is_new = not promo_file.exists()

        with open(promo_file, 'a', newline='') as f:
            writer = csv.writer(f)
            if is_new:
                writer.writerow(CHANGE_COLUMNS)
            writer.writerow([
                decision_data.get('timestamp', ''),
                decision_data.get('product_id', ''),
                decision_data.get('metadata', {}).get('product_name', ''),
                decision_data.get('channel', ''),
                decision_data.get('quantity', 0),
                decision_data.get('base_total', 0),
                decision_data.get('total', 0),
                decision_data.get('discount', 0),
                decision_data.get('promotion_id', ''),
                decision_data.get('promotion_name', '')
            ])

    def query_logs(self,
                   product_id: Optional[int] = None,
                   start_date: Optional[date] = None,
                   end_date: Optional[date] = None) -> List[Dict]:
        """Query logged pricing results over an inclusive day range"""
        end_date = end_date or date.today()
        start_date = start_date or end_date

        results = []
        current = start_date
        while current <= end_date:
            log_file = self._decision_file(current)

            if log_file.exists():
                with open(log_file, 'r') as f:
                    for line in f:
                        entry = json.loads(line)
                        if product_id is not None and entry.get('product_id') != product_id:
                            continue
                        results.append(entry)

            current += timedelta(days=1)

        return results

    def generate_daily_report(self, day: Optional[date] = None) -> Dict:
        """Summarize the promotions applied on one day"""
        day = day or date.today()
        report_date = day.isoformat()

        promo_file = self._promotion_file(day)
        if not promo_file.exists():
            return {'date': report_date, 'discounted_lines': 0, 'total_discount': 0.0, 'by_promotion': {}}

        with open(promo_file, 'r') as f:
            rows = list(csv.DictReader(f))

        by_promotion = {}
        for row in rows:
            name = row['promotion_name'] or row['promotion_id']
            stats = by_promotion.setdefault(name, {'lines': 0, 'discount': 0.0})
            stats['lines'] += 1
            stats['discount'] += float(row['discount'])

        return {
            'date': report_date,
            'discounted_lines': len(rows),
            'total_discount': sum(float(r['discount']) for r in rows),
            'by_promotion': by_promotion
        }

    def _entry_time(self, decision_data: Dict) -> datetime:
        try:
            return datetime.fromisoformat(decision_data['timestamp'])
        except (KeyError, TypeError, ValueError):
            logger.debug("Audit entry without a usable timestamp, using current time")
            return datetime.now()

    def _decision_file(self, day: date) -> Path:
        return self.decisions_dir / f"decisions_{day.isoformat()}.jsonl"

    def _promotion_file(self, day: date) -> Path:
        return self.promotions_dir / f"promotions_{day.isoformat()}.csv"

    def _generate_log_id(self, prefix: str = 'PRC') -> str:
        """Generate unique log ID"""
        self._counter += 1
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S%f")[:-3]
        return f"{prefix}_{timestamp}_{self._counter:04d}"
