"""表单定义: 内置默认种子."""
