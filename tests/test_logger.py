import json
import os
import tempfile
from unittest import TestCase

from bdpflow.flow.logger import FlowFileLogger, FlowLogger

SINGLE_TRACE = {
    "trace_format": "JSON",
    "trace_version": "0.1",
    "traces": [
        {
            "common_fields": {
                "local_ip": "10.0.0.1",
                "remote_ip": "10.0.0.2",
            },
            "events": [],
        }
    ],
}


class FlowLoggerTest(TestCase):
    def test_empty(self):
        logger = FlowLogger()
        self.assertEqual(
            logger.to_dict(),
            {"trace_format": "JSON", "trace_version": "0.1", "traces": []},
        )

    def test_single_trace(self):
        logger = FlowLogger()
        trace = logger.start_trace(local_ip="10.0.0.1", remote_ip="10.0.0.2")
        logger.end_trace(trace)
        self.assertEqual(logger.to_dict(), SINGLE_TRACE)

    def test_log_event(self):
        logger = FlowLogger()
        trace = logger.start_trace(local_ip="10.0.0.1", remote_ip="10.0.0.2")
        trace.log_event(
            category="transport",
            event="packet_dropped",
            data={"trigger": "not_in_flow"},
            timestamp=1500,
        )
        self.assertEqual(
            logger.to_dict()["traces"][0]["events"],
            [
                {
                    "data": {"trigger": "not_in_flow"},
                    "name": "transport:packet_dropped",
                    "time": 1.5,
                }
            ],
        )

    def test_trace_name(self):
        logger = FlowLogger()
        trace = logger.start_trace(local_ip="2001:db8::1", remote_ip="10.0.0.2")
        self.assertEqual(trace.name, "2001_db8__1-10.0.0.2")


class FlowFileLoggerTest(TestCase):
    def test_invalid_path(self):
        with self.assertRaises(ValueError) as cm:
            FlowFileLogger("this_path_should_not_exist")
        self.assertEqual(
            str(cm.exception),
            "Flow log output directory 'this_path_should_not_exist' does not exist",
        )

    def test_single_trace(self):
        with tempfile.TemporaryDirectory() as dirpath:
            logger = FlowFileLogger(dirpath)
            trace = logger.start_trace(local_ip="10.0.0.1", remote_ip="10.0.0.2")
            logger.end_trace(trace)

            filepath = os.path.join(dirpath, "10.0.0.1-10.0.0.2.json")
            self.assertTrue(os.path.exists(filepath))

            with open(filepath, "r") as fp:
                data = json.load(fp)
            self.assertEqual(data, SINGLE_TRACE)
            self.assertEqual(logger.to_dict()["traces"], [])
