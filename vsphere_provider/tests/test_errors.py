import unittest

from pyVmomi import vim

from vsphere_provider.errors import RemoteOperationError, parse_vcenter_error


class VCenterErrorTests(unittest.TestCase):
    def test_known_fault_is_mapped(self):
        message, info = parse_vcenter_error(vim.fault.ResourceInUse())
        self.assertEqual(info["title"], "Port Group In Use")
        self.assertEqual(info["fault_type"], "vim.fault.ResourceInUse")
        self.assertTrue(info["is_recoverable"])
        self.assertIn("connected virtual NICs", message)

    def test_fault_msg_is_preferred(self):
        fault = vim.fault.HostConfigFault(msg="vSwitch9 does not exist")
        message, info = parse_vcenter_error(fault)
        self.assertEqual(message, "vSwitch9 does not exist")
        self.assertEqual(info["original_message"], "vSwitch9 does not exist")

    def test_unknown_error_passes_through(self):
        self.assertEqual(parse_vcenter_error(RuntimeError("socket closed")), ("socket closed", None))

    def test_remote_operation_error_message(self):
        err = RemoteOperationError("deleting port group", TimeoutError("operation timed out after 300s"))
        self.assertEqual(str(err), "error deleting port group: operation timed out after 300s")
        self.assertIsNone(err.fault_info)
        self.assertEqual(err.operation, "deleting port group")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
